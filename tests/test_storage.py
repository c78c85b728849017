import pytest

from storefront.storage import MemoryStorage


@pytest.fixture(params=["memory", "database"])
def any_storage(request, app):
    if request.param == "memory":
        return MemoryStorage()
    return app.extensions["storefront"].storage


def test_set_get_overwrite_delete(any_storage):
    assert any_storage.get("k") is None

    any_storage.set("k", "one")
    any_storage.set("k", "two")
    assert any_storage.get("k") == "two"
    assert "k" in any_storage.keys()

    any_storage.delete("k")
    any_storage.delete("k")
    assert any_storage.get("k") is None
