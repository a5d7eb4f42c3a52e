import asyncio

from schemas.notification import NotificationCreate
from storage.hybrid_store import HybridEntityStore
from storage.memory_store import MemoryEntityStore


class _Flag:
    def __init__(self, value):
        self.value = value

    def __call__(self):
        return self.value


def _notification(title):
    return NotificationCreate(title=title, message="m", type="info")


def test_routes_to_fallback_when_primary_unavailable():
    primary, fallback = MemoryEntityStore(), MemoryEntityStore()
    hybrid = HybridEntityStore(primary, fallback, is_available=_Flag(False))

    asyncio.run(hybrid.create_notification(_notification("offline")))

    assert asyncio.run(primary.get_notifications()) == []
    assert len(asyncio.run(fallback.get_notifications())) == 1


def test_availability_is_checked_per_call_and_data_is_not_synced():
    primary, fallback = MemoryEntityStore(), MemoryEntityStore()
    flag = _Flag(True)
    hybrid = HybridEntityStore(primary, fallback, is_available=flag)

    asyncio.run(hybrid.create_notification(_notification("online")))
    flag.value = False
    asyncio.run(hybrid.create_notification(_notification("offline")))
    assert [n.title for n in asyncio.run(hybrid.get_notifications())] == ["offline"]

    flag.value = True
    assert [n.title for n in asyncio.run(hybrid.get_notifications())] == ["online"]
    assert hybrid.active is primary
