from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, Numeric, UniqueConstraint
from sqlalchemy.orm import relationship

from shopcart.data.database import Base


class CartLineModel(Base):
    __tablename__ = "cart_lines"

    id = Column(String(32), primary_key=True)
    cart_id = Column(Integer, ForeignKey("carts.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False)

    product_id = Column(String(64), nullable=False)
    variant_id = Column(String(64), nullable=False)
    quantity = Column(Integer, nullable=False)

    # snapshot wariantu z chwili ostatniej rekonsyliacji
    variant_type = Column(String, nullable=False, default="")
    price = Column(Numeric(12, 2), nullable=False)
    stock = Column(Integer, nullable=False)
    available = Column(Boolean, nullable=False)

    subtotal = Column(Numeric(12, 2), nullable=False)
    is_active = Column(Boolean, nullable=False)

    cart = relationship("CartModel", back_populates="lines")

    __table_args__ = (
        UniqueConstraint("cart_id", "product_id", "variant_id", name="u_cart_product_variant"),
    )
