# shopcart/tasks/cleanup.py
from shopcart.celery_worker import celery_app
from shopcart.data.database import SessionLocal
from shopcart.services.cart_service import CartService
from shopcart.services.product_client import HttpVariantResolver
from shopcart.utils.logging import get_logger

logger = get_logger(__name__)


@celery_app.task(name="shopcart.tasks.cleanup.cleanup_inactive_lines_task")
def cleanup_inactive_lines_task():
    logger.info("Cleanup inactive lines task started")

    db = SessionLocal()
    try:
        svc = CartService(db=db, resolver=HttpVariantResolver())
        cleaned = svc.cleanup_all_carts()
        return {"carts_cleaned": cleaned}
    finally:
        db.close()
