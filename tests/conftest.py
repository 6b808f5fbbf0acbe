import pytest

# Test layer by directory; bdd scenarios drive commands like application tests
_LAYER_MARKERS = {
    "domain": "domain",
    "application": "application",
    "bdd": "application",
    "integration": "integration",
}


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="domain.toml environment the storefront runs under",
    )


def pytest_collection_modifyitems(config, items):
    for item in items:
        layer = next((part for part in item.path.parts if part in _LAYER_MARKERS), None)
        if layer is None:
            continue

        item.add_marker(getattr(pytest.mark, _LAYER_MARKERS[layer]))
        if layer == "integration" and item.get_closest_marker("fast") is None:
            item.add_marker(pytest.mark.slow)
