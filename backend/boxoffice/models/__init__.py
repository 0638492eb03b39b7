from .events import Event, SubscriptionDescriptor, TicketCategory, PURCHASE_CONTEXT_EVENT, PURCHASE_CONTEXT_SUBSCRIPTION
from .promotions import PromoCodeDiscount
from .reservations import (
    TicketReservation,
    Ticket,
    AdditionalService,
    AdditionalServiceText,
    AdditionalServiceItem,
    Subscription,
)

__all__ = [
    'Event', 'SubscriptionDescriptor', 'TicketCategory',
    'PURCHASE_CONTEXT_EVENT', 'PURCHASE_CONTEXT_SUBSCRIPTION',
    'PromoCodeDiscount',
    'TicketReservation', 'Ticket',
    'AdditionalService', 'AdditionalServiceText', 'AdditionalServiceItem',
    'Subscription',
]
