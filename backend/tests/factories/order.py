"""Factory Boy definition for :class:`tenantapi.models.Order`."""

from __future__ import annotations

import factory

from tenantapi.models import Order
from tests.factories import BaseFactory
from tests.factories.user import UserFactory


class OrderFactory(BaseFactory):
    """Orders inherit the organization of their owner."""

    class Meta:
        model = Order

    total_amount = factory.Sequence(lambda n: 10.0 + n)
    user = factory.SubFactory(UserFactory)
    organization = factory.LazyAttribute(lambda o: o.user.organization)
