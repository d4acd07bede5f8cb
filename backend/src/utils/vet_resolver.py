"""
Resolve the vet profile that belongs to a signed-in VET user.

Strategies are tried in order and the first one that finds a profile wins:
1. by_foreign_key: the vet row whose user_id points at the user
2. by_email: the vet row with the same email as the user

New strategies can be appended to VET_RESOLUTION_STRATEGIES.
"""

import logging
from typing import Callable, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from models import Vet

logger = logging.getLogger(__name__)

VetStrategy = Callable[[Session, int, str], Optional[Vet]]


def by_foreign_key(db: Session, user_id: int, email: str) -> Optional[Vet]:
    return db.query(Vet).filter(Vet.user_id == user_id).first()


def by_email(db: Session, user_id: int, email: str) -> Optional[Vet]:
    if not email:
        return None
    return db.query(Vet).filter(func.lower(Vet.email) == email.lower()).first()


VET_RESOLUTION_STRATEGIES: List[Tuple[str, VetStrategy]] = [
    ("by_foreign_key", by_foreign_key),
    ("by_email", by_email),
]


def resolve_vet_for_user(
    db: Session,
    user_id: int,
    email: str,
    strategies: Optional[List[Tuple[str, VetStrategy]]] = None
) -> Optional[Vet]:
    """
    Find the vet profile linked to a user.

    Args:
        db: Database session
        user_id: Signed-in user's ID
        email: Signed-in user's email
        strategies: Override the default strategy chain

    Returns:
        The first vet found, or None if no strategy matches
    """
    for name, strategy in strategies or VET_RESOLUTION_STRATEGIES:
        vet = strategy(db, user_id, email)
        if vet is not None:
            logger.debug(f"Resolved vet {vet.id} for user {user_id} via {name}")
            return vet
    return None
