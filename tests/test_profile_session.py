"""Tests for the guest and authenticated profile session."""

import pytest

from know_your_bite.adapters.local_auth_provider import LocalAuthProvider
from know_your_bite.domain.errors import AuthenticationError, DuplicateAccountError
from know_your_bite.domain.profiles import DailyGoals
from know_your_bite.services.profiles import ProfileSession
from know_your_bite.services.store import CURRENT_USER_KEY, InMemoryStore
from know_your_bite.services.sync import ProfileSyncQueue
from tests.conftest import InMemoryProfileRepository, make_product


def _session(
    store: InMemoryStore,
    repository: InMemoryProfileRepository | None = None,
    history_limit: int = 10,
) -> ProfileSession:
    resolved = repository or InMemoryProfileRepository()
    return ProfileSession(
        repository=resolved,
        auth_provider=LocalAuthProvider(store),
        store=store,
        sync_queue=ProfileSyncQueue(writer=resolved.update, delay_seconds=0.0),
        history_limit=history_limit,
    )


def test_guest_changes_are_not_persisted(store: InMemoryStore) -> None:
    repository = InMemoryProfileRepository()
    session = _session(store, repository)

    session.continue_as_guest()
    session.add_to_log(make_product())
    session.record_view(make_product("Apple"))

    assert session.state == "guest"
    assert session.profile.is_guest
    assert len(session.profile.diet_plan) == 1
    assert repository.updates == []
    assert store.get(CURRENT_USER_KEY) is None


def test_sign_up_creates_profile_and_pointer(store: InMemoryStore) -> None:
    repository = InMemoryProfileRepository()
    session = _session(store, repository)

    profile = session.sign_up("Ada", "ada@example.com", "secret1")

    assert session.state == "authenticated"
    assert profile.id in repository.profiles
    assert profile.daily_goals.calories == 2200
    assert store.get(CURRENT_USER_KEY) == {
        "id": profile.id,
        "name": "Ada",
        "email": "ada@example.com",
    }


def test_sign_out_keeps_profile_and_sign_in_restores_it(
    store: InMemoryStore,
) -> None:
    repository = InMemoryProfileRepository()
    session = _session(store, repository)
    profile = session.sign_up("Ada", "ada@example.com", "secret1")
    session.add_to_log(make_product(), quantity=2)

    session.sign_out()

    assert session.state == "guest"
    assert session.profile.diet_plan == []
    assert store.get(CURRENT_USER_KEY) is None
    assert profile.id in repository.profiles

    restored = session.sign_in("ada@example.com", "secret1")

    assert restored.id == profile.id
    assert len(restored.diet_plan) == 1
    assert restored.diet_plan[0].quantity == 2


def test_authenticated_changes_are_written_back(store: InMemoryStore) -> None:
    repository = InMemoryProfileRepository()
    session = _session(store, repository)
    profile = session.sign_up("Ada", "ada@example.com", "secret1")
    goals = DailyGoals(calories=1900, protein=120, carbs=200, fats=60)

    session.set_goals(goals)

    assert repository.profiles[profile.id].daily_goals == goals
    assert session.sync_queue.status().last_synced_at is not None


def test_restore_resumes_current_user(store: InMemoryStore) -> None:
    repository = InMemoryProfileRepository()
    first = _session(store, repository)
    profile = first.sign_up("Ada", "ada@example.com", "secret1")

    second = _session(store, repository)
    restored = second.restore()

    assert second.state == "authenticated"
    assert restored.id == profile.id


def test_restore_clears_pointer_without_profile(store: InMemoryStore) -> None:
    store.set(CURRENT_USER_KEY, {"id": "ghost", "name": "Ghost", "email": "g@x.io"})
    session = _session(store)

    session.restore()

    assert session.state == "guest"
    assert store.get(CURRENT_USER_KEY) is None


def test_sign_in_creates_missing_profile(store: InMemoryStore) -> None:
    LocalAuthProvider(store).sign_up("Ada", "ada@example.com", "secret1")
    repository = InMemoryProfileRepository()
    session = _session(store, repository)

    profile = session.sign_in("ada@example.com", "secret1")

    assert profile.name == "Ada"
    assert profile.id in repository.profiles


def test_auth_errors_leave_guest_state(store: InMemoryStore) -> None:
    session = _session(store)
    session.sign_up("Ada", "ada@example.com", "secret1")
    session.sign_out()

    with pytest.raises(DuplicateAccountError):
        session.sign_up("Ada", "ada@example.com", "secret1")
    with pytest.raises(AuthenticationError):
        session.sign_in("ada@example.com", "wrong-password")
    assert session.state == "guest"


def test_record_view_dedupes_and_caps_history(store: InMemoryStore) -> None:
    session = _session(store, history_limit=3)

    for name in ["Apple", "Banana", "Cherry", "Apple", "Date"]:
        session.record_view(make_product(name))

    assert [item.name for item in session.profile.history] == [
        "Date",
        "Apple",
        "Cherry",
    ]


def test_remove_from_log(store: InMemoryStore) -> None:
    session = _session(store)
    session.add_to_log(make_product("Apple"))
    session.add_to_log(make_product("Banana"))

    removed = session.remove_from_log(0)

    assert removed.product.name == "Apple"
    assert [entry.product.name for entry in session.profile.diet_plan] == ["Banana"]
    with pytest.raises(IndexError):
        session.remove_from_log(5)


def test_failed_write_stays_pending_until_flushed(store: InMemoryStore) -> None:
    repository = InMemoryProfileRepository()
    session = _session(store, repository)
    profile = session.sign_up("Ada", "ada@example.com", "secret1")
    repository.failures_left = 1

    session.add_to_log(make_product())

    status = session.sync_queue.status()
    assert status.pending
    assert status.attempts == 1
    assert repository.profiles[profile.id].diet_plan == []

    assert session.sync_queue.flush()
    assert len(repository.profiles[profile.id].diet_plan) == 1
