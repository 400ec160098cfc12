"""
Tests for adapter loading and actor resolution.
"""

import pytest
from django.core.exceptions import ImproperlyConfigured

from stockledger.adapters import get_actor_resolver, get_event_publisher, reset_adapters
from stockledger.adapters.auth import UserActorResolver
from stockledger.adapters.memory import InMemoryPublisher
from stockledger.adapters.noop import NoopPublisher
from stockledger.models import ActorRole
from stockledger.protocols import ActorResolver, EventPublisher


class TestLoading:
    """Tests for configured backends."""

    def test_publisher_from_settings(self):
        publisher = get_event_publisher()
        assert isinstance(publisher, InMemoryPublisher)
        assert isinstance(publisher, EventPublisher)

    def test_cached(self):
        assert get_event_publisher() is get_event_publisher()

    def test_default_publisher(self, settings):
        settings.STOCKLEDGER = {}
        reset_adapters()
        assert isinstance(get_event_publisher(), NoopPublisher)

    def test_default_resolver(self):
        resolver = get_actor_resolver()
        assert isinstance(resolver, UserActorResolver)
        assert isinstance(resolver, ActorResolver)

    def test_bad_path(self, settings):
        settings.STOCKLEDGER = {'EVENT_PUBLISHER': 'nowhere.Publisher'}
        reset_adapters()
        with pytest.raises(ImproperlyConfigured):
            get_event_publisher()

    def test_empty_path(self, settings):
        settings.STOCKLEDGER = {'ACTOR_RESOLVER': ''}
        reset_adapters()
        with pytest.raises(ImproperlyConfigured):
            get_actor_resolver()


@pytest.mark.django_db
class TestUserActorResolver:
    """Tests for UserActorResolver.resolve()."""

    def test_superuser_is_manager(self, manager_user):
        actor = UserActorResolver().resolve(manager_user)
        assert actor.id == manager_user.pk
        assert actor.is_manager

    def test_plain_user_is_staff(self, staff_user):
        actor = UserActorResolver().resolve(staff_user)
        assert actor.role == ActorRole.STAFF
        assert actor.department_id is None

    def test_reads_role_and_department(self, staff_user, grocery):
        staff_user.role = 'staff'
        staff_user.department_id = grocery.pk

        actor = UserActorResolver().resolve(staff_user)

        assert actor.role == ActorRole.STAFF
        assert actor.department_id == grocery.pk

    def test_explicit_role_wins(self, staff_user):
        staff_user.role = 'manager'
        assert UserActorResolver().resolve(staff_user).is_manager
