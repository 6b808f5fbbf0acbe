import os

import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def storefront_bed(request):
    os.environ["PROTEAN_ENV"] = request.config.option.env

    from storefront.domain import storefront
    from storefront.utils.db import drop_db, setup_db

    bed = DomainFixture(storefront)
    bed.setup()
    setup_db(storefront)
    yield bed
    drop_db(storefront)
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(storefront_bed):
    """Push the domain context for each test and reset all state afterwards."""
    from storefront.notification import reset_notifier

    with storefront_bed.domain_context():
        yield

        from protean import current_domain

        for _, provider in current_domain.providers.items():
            provider._data_reset()
        for _, broker in current_domain.brokers.items():
            broker._data_reset()
        current_domain.event_store.store._data_reset()

    reset_notifier()


@pytest.fixture()
def restock_on_cancel(monkeypatch):
    monkeypatch.setenv("RESTOCK_ON_CANCEL", "true")
