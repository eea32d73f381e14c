"""Offer lifecycle for the peer-to-peer token swap escrow."""

from swap_escrow.apps.escrow.discovery import OfferDiscovery
from swap_escrow.apps.escrow.lifecycle import OfferLifecycleController
from swap_escrow.apps.escrow.models import (
    Confirmation,
    CreateOfferRequest,
    MenuAction,
    OfferView,
)
from swap_escrow.apps.escrow.selection import Candidates, FixedChoicePolicy, SelectionPolicy
from swap_escrow.apps.escrow.token_accounts import TokenAccountResolver

__all__ = [
    "Candidates",
    "Confirmation",
    "CreateOfferRequest",
    "FixedChoicePolicy",
    "MenuAction",
    "OfferDiscovery",
    "OfferLifecycleController",
    "OfferView",
    "SelectionPolicy",
    "TokenAccountResolver",
]
