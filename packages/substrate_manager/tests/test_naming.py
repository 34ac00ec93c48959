from __future__ import annotations

import pytest

from substrate_manager.naming import to_pascal_case, to_snake_case


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("node-template-runtime", "node_template_runtime"),
        ("pallet_assets", "pallet_assets"),
        ("HelloWorld", "hello_world"),
        ("my chain", "my_chain"),
        ("pallet--double-", "pallet_double"),
        ("v2-node", "v2_node"),
    ],
)
def test_to_snake_case(value: str, expected: str) -> None:
    assert to_snake_case(value) == expected


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("pallet_foo", "PalletFoo"),
        ("pallet-assets", "PalletAssets"),
        ("frame_system", "FrameSystem"),
        ("balances", "Balances"),
    ],
)
def test_to_pascal_case(value: str, expected: str) -> None:
    assert to_pascal_case(value) == expected
