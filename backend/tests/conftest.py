"""
Pytest fixtures for boxoffice pricing tests.

Provides test database setup, purchase-context fixtures, line-item factories
and test client.
"""

import uuid
from decimal import Decimal

import pytest
from boxoffice import create_app
from boxoffice.extensions import db
from boxoffice.models import (
    AdditionalService,
    AdditionalServiceItem,
    AdditionalServiceText,
    Event,
    PromoCodeDiscount,
    Subscription,
    SubscriptionDescriptor,
    Ticket,
    TicketCategory,
    TicketReservation,
)


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'DEFAULT_LOCALE': 'en',
        'DYNAMIC_DISCOUNT_LABEL': 'Discount applied',
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def event(db_session):
    """Event taxed at 10%, VAT added on top of ticket prices."""
    event = Event(
        short_name="pycon",
        display_name="PyCon",
        currency="EUR",
        vat=Decimal("10.00"),
        vat_status="NOT_INCLUDED",
        locales=["en", "de"],
    )
    db_session.add(event)
    db_session.commit()
    return event


@pytest.fixture(scope='function')
def subscription_descriptor(db_session):
    """Subscription sold at 50.00 EUR, VAT included at 10%."""
    descriptor = SubscriptionDescriptor(
        id=str(uuid.uuid4()),
        title={"en": "Season pass", "de": "Saisonkarte"},
        price_cts=5000,
        currency="EUR",
        vat=Decimal("10.00"),
        vat_status="INCLUDED",
    )
    db_session.add(descriptor)
    db_session.commit()
    return descriptor


@pytest.fixture(scope='function')
def make_category(db_session):
    """Factory for ticket categories."""
    def _make(event, name, src_price_cts=1000):
        category = TicketCategory(event_id=event.id, name=name, src_price_cts=src_price_cts)
        db_session.add(category)
        db_session.commit()
        return category
    return _make


@pytest.fixture(scope='function')
def make_reservation(db_session):
    """Factory for reservations of an event or a subscription descriptor."""
    def _make(context, **kwargs):
        values = {
            "id": str(uuid.uuid4()),
            "status": "PENDING",
            "currency_code": context.currency,
            "vat_status": context.vat_status,
            "user_language": "en",
        }
        values.update(kwargs)
        if context.is_event:
            values.setdefault("event_id", context.id)
        else:
            values.setdefault("subscription_descriptor_id", context.id)
        reservation = TicketReservation(**values)
        db_session.add(reservation)
        db_session.commit()
        return reservation
    return _make


@pytest.fixture(scope='function')
def make_ticket(db_session):
    """Factory for tickets of a reservation."""
    def _make(reservation, category, src_price_cts=None, **kwargs):
        ticket = Ticket(
            uuid=str(uuid.uuid4()),
            event_id=category.event_id,
            category_id=category.id,
            reservation_id=reservation.id,
            src_price_cts=category.src_price_cts if src_price_cts is None else src_price_cts,
            currency_code=reservation.currency_code,
            **kwargs,
        )
        db_session.add(ticket)
        db_session.commit()
        return ticket
    return _make


@pytest.fixture(scope='function')
def make_promo(db_session):
    """Factory for promo code / dynamic discounts."""
    def _make(code, discount_type, amount, categories=(), code_type="PROMO_CODE", **kwargs):
        promo = PromoCodeDiscount(
            promo_code=code,
            discount_type=discount_type,
            discount_amount=amount,
            category_ids=list(categories),
            code_type=code_type,
            **kwargs,
        )
        db_session.add(promo)
        db_session.commit()
        return promo
    return _make


@pytest.fixture(scope='function')
def make_additional_service(db_session):
    """Factory for an additional service with localized titles."""
    def _make(event, titles, vat_type="INHERITED", vat=None, src_price_cts=500, ordinal=0, service_type="SUPPLEMENT"):
        service = AdditionalService(
            event_id=event.id,
            service_type=service_type,
            vat_type=vat_type,
            vat=vat,
            src_price_cts=src_price_cts,
            currency_code=event.currency,
            ordinal=ordinal,
        )
        db_session.add(service)
        db_session.flush()
        for locale, value in titles.items():
            db_session.add(AdditionalServiceText(
                additional_service_id=service.id, locale=locale, text_type="TITLE", value=value,
            ))
        db_session.commit()
        return service
    return _make


@pytest.fixture(scope='function')
def make_service_item(db_session):
    """Factory for purchased additional-service items."""
    def _make(reservation, service, src_price_cts=None):
        item = AdditionalServiceItem(
            uuid=str(uuid.uuid4()),
            reservation_id=reservation.id,
            additional_service_id=service.id,
            event_id=service.event_id,
            src_price_cts=service.src_price_cts if src_price_cts is None else src_price_cts,
            currency_code=reservation.currency_code,
        )
        db_session.add(item)
        db_session.commit()
        return item
    return _make


@pytest.fixture(scope='function')
def make_subscription(db_session):
    """Factory for subscriptions, bought in a reservation or pre-existing."""
    def _make(descriptor, reservation=None, src_price_cts=None):
        subscription = Subscription(
            id=str(uuid.uuid4()),
            subscription_descriptor_id=descriptor.id,
            reservation_id=reservation.id if reservation is not None else None,
            src_price_cts=descriptor.price_cts if src_price_cts is None else src_price_cts,
            currency=descriptor.currency,
        )
        db_session.add(subscription)
        db_session.commit()
        return subscription
    return _make
