"""
Catalog operations on sweets.

Every operation takes an optional repository (defaults to the ORM-backed
SweetRepository). Mutations look the sweet up first so a missing id always
surfaces as SweetNotFound.
"""
import logging
from .exceptions import SweetNotFound, OutOfStock, InsufficientQuantity, StockLimitExceeded
from .models import MAX_QUANTITY
from .repositories import SweetRepository

logger = logging.getLogger(__name__)

# Conditional stock updates retried when stock changes between read and write
STOCK_UPDATE_ATTEMPTS = 3


def _repository(repository):
    return repository or SweetRepository()


def create(data, repository=None):
    """Persist a new sweet from validated fields"""
    sweet = _repository(repository).create(**data)
    logger.info(f"Created sweet {sweet.pk} ({sweet.name})")
    return sweet


def find_all(filters=None, repository=None):
    """List sweets matching name/category substrings and a price range, newest first"""
    return _repository(repository).list(filters or {})


def find_one(sweet_id, repository=None):
    sweet = _repository(repository).get(sweet_id)
    if sweet is None:
        raise SweetNotFound(sweet_id)
    return sweet


def update(sweet_id, data, repository=None):
    """Apply only the supplied fields; absent fields keep their values"""
    repository = _repository(repository)
    sweet = find_one(sweet_id, repository)
    sweet = repository.update(sweet, data)
    logger.info(f"Updated sweet {sweet.pk}: {sorted(data)}")
    return sweet


def remove(sweet_id, repository=None):
    repository = _repository(repository)
    sweet = find_one(sweet_id, repository)
    repository.delete(sweet)
    logger.info(f"Deleted sweet {sweet_id}")


def ensure_available(sweet, quantity):
    """
    Raise when ``quantity`` cannot be taken from ``sweet``.

    Taking exactly the remaining quantity is allowed.
    """
    if sweet.quantity == 0:
        raise OutOfStock()
    if quantity > sweet.quantity:
        raise InsufficientQuantity(available=sweet.quantity, requested=quantity)


def purchase(sweet_id, quantity, repository=None):
    """
    Decrease stock by ``quantity``.

    Raises:
        SweetNotFound: no sweet with this id
        OutOfStock: the sweet has no stock left
        InsufficientQuantity: more requested than on hand
    """
    repository = _repository(repository)

    for _ in range(STOCK_UPDATE_ATTEMPTS):
        sweet = find_one(sweet_id, repository)
        ensure_available(sweet, quantity)
        if repository.decrement_quantity(sweet.pk, quantity):
            break
        logger.info(f"Stock of sweet {sweet_id} changed during purchase, re-reading")
    else:
        raise InsufficientQuantity(available=sweet.quantity, requested=quantity)

    sweet = find_one(sweet_id, repository)
    logger.info(f"Purchased {quantity} of sweet {sweet_id}, {sweet.quantity} left")
    return sweet


def ensure_capacity(sweet, quantity):
    """Raise when adding ``quantity`` would push stock past MAX_QUANTITY"""
    if sweet.quantity + quantity > MAX_QUANTITY:
        raise StockLimitExceeded(available=sweet.quantity, requested=quantity, limit=MAX_QUANTITY)


def restock(sweet_id, quantity, repository=None):
    """
    Increase stock by ``quantity``.

    Raises:
        SweetNotFound: no sweet with this id
        StockLimitExceeded: the new stock would not fit the quantity column
    """
    repository = _repository(repository)

    for _ in range(STOCK_UPDATE_ATTEMPTS):
        sweet = find_one(sweet_id, repository)
        ensure_capacity(sweet, quantity)
        if repository.increment_quantity(sweet.pk, quantity):
            break
        logger.info(f"Stock of sweet {sweet_id} changed during restock, re-reading")
    else:
        raise StockLimitExceeded(available=sweet.quantity, requested=quantity, limit=MAX_QUANTITY)

    sweet = find_one(sweet_id, repository)
    logger.info(f"Restocked sweet {sweet_id} with {quantity}, now {sweet.quantity}")
    return sweet
