"""Tenant scoping rules shared by the ledger, the approval queue and the listings."""

import uuid

from workforce.core.errors import Forbidden, ValidationError
from workforce.db.models import User


def ensure_in_scope(actor: User, organization_id: uuid.UUID) -> None:
    if actor.is_global_admin:
        return
    if actor.organization_id is None or actor.organization_id != organization_id:
        raise Forbidden("Resource belongs to another organization")


def organization_scope(actor: User, requested: uuid.UUID | None = None) -> uuid.UUID | None:
    """
    Organization a read is limited to.

    None means "every organization" and is only returned for a global admin
    that did not ask for a specific one.
    """
    if actor.is_global_admin:
        return requested
    if actor.organization_id is None:
        raise ValidationError("User is not attached to an organization")
    if requested is not None and requested != actor.organization_id:
        raise Forbidden("Cannot read another organization's data")
    return actor.organization_id
