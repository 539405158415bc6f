# shopcart/utils/retry.py
from tenacity import retry, stop_after_attempt, wait_exponential, wait_random, retry_if_exception_type
import requests

from shopcart.utils.settings import CART_MAX_RETRIES


class VersionConflict(Exception):
    """Zapis koszyka przegral z inna operacja (wersja sie zmienila)."""


def http_retry():
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.3, min=0.3, max=3),
        retry=retry_if_exception_type((requests.ConnectionError, requests.Timeout)),
    )


def conflict_retry(attempts: int | None = None):
    # caly use case od nowa: odczyt, resolve, zapis
    return retry(
        reraise=True,
        stop=stop_after_attempt(attempts or CART_MAX_RETRIES),
        wait=wait_random(min=0, max=0.05),
        retry=retry_if_exception_type(VersionConflict),
    )
