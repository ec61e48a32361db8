from __future__ import annotations

import pytest
from support.fakes import make_deps, send_json, connect_new, connect_pair

from pair_relay.state import Role


@pytest.mark.asyncio
async def test_invalid_role_is_rejected_without_side_effects() -> None:
    deps = make_deps()
    conn, transport = await connect_new(deps)
    transport.clear()

    await send_json(conn, deps, {"type": "set-role", "role": "spectator"})
    await send_json(conn, deps, {"type": "set-role"})

    assert transport.messages() == [
        {"type": "error", "error": 'Invalid role. Must be "asker" or "helper"'},
        {"type": "error", "error": 'Invalid role. Must be "asker" or "helper"'},
    ]
    assert deps.sessions.get(conn.uid).role is None


@pytest.mark.asyncio
async def test_valid_role_is_acknowledged() -> None:
    deps = make_deps()
    conn, transport = await connect_new(deps)
    transport.clear()

    await send_json(conn, deps, {"type": "set-role", "role": "asker"})

    assert transport.messages() == [{"type": "role-set", "role": "asker", "uid": conn.uid}]
    assert deps.sessions.get(conn.uid).role is Role.ASKER


@pytest.mark.asyncio
async def test_helper_pairs_with_asker_symmetrically() -> None:
    deps = make_deps()
    asker, asker_tx = await connect_new(deps)
    helper, helper_tx = await connect_new(deps)
    await send_json(asker, deps, {"type": "set-role", "role": "asker"})
    asker_tx.clear()
    helper_tx.clear()

    await send_json(helper, deps, {"type": "set-role", "role": "helper", "pairWithUID": asker.uid})

    assert helper_tx.messages() == [
        {"type": "paired", "pairedWithUID": asker.uid, "role": "helper"},
        {"type": "role-set", "role": "helper", "uid": helper.uid},
    ]
    assert asker_tx.messages() == [{"type": "paired", "pairedWithUID": helper.uid, "role": "asker"}]
    assert deps.sessions.get(helper.uid).paired_with == asker.uid
    assert deps.sessions.get(asker.uid).paired_with == helper.uid


@pytest.mark.asyncio
async def test_pairing_with_unknown_asker_errors_but_still_sets_role() -> None:
    deps = make_deps()
    helper, helper_tx = await connect_new(deps)
    helper_tx.clear()

    await send_json(helper, deps, {"type": "set-role", "role": "helper", "pairWithUID": "00000000"})

    assert helper_tx.messages() == [
        {"type": "error", "error": "Asker with that UID not found"},
        {"type": "role-set", "role": "helper", "uid": helper.uid},
    ]
    assert deps.sessions.get(helper.uid).role is Role.HELPER
    assert deps.sessions.get(helper.uid).paired_with is None


@pytest.mark.asyncio
async def test_pairing_requires_target_to_be_an_asker() -> None:
    deps = make_deps()
    other, other_tx = await connect_new(deps)
    helper, helper_tx = await connect_new(deps)
    await send_json(other, deps, {"type": "set-role", "role": "helper"})
    other_tx.clear()
    helper_tx.clear()

    await send_json(helper, deps, {"type": "set-role", "role": "helper", "pairWithUID": other.uid})

    assert helper_tx.messages("error") == [{"type": "error", "error": "Asker with that UID not found"}]
    assert other_tx.messages() == []
    assert deps.sessions.get(other.uid).paired_with is None


@pytest.mark.asyncio
async def test_asker_cannot_initiate_pairing() -> None:
    deps = make_deps()
    target, _ = await connect_new(deps)
    asker, asker_tx = await connect_new(deps)
    await send_json(target, deps, {"type": "set-role", "role": "asker"})
    asker_tx.clear()

    await send_json(asker, deps, {"type": "set-role", "role": "asker", "pairWithUID": target.uid})

    assert asker_tx.messages() == [{"type": "role-set", "role": "asker", "uid": asker.uid}]
    assert deps.sessions.get(asker.uid).paired_with is None


@pytest.mark.asyncio
async def test_pairing_with_offline_asker_only_notifies_helper() -> None:
    deps = make_deps()
    (asker, _), (helper, _) = await connect_pair(deps)
    deps.registry.remove(asker)
    newcomer, newcomer_tx = await connect_new(deps)
    newcomer_tx.clear()

    await send_json(newcomer, deps, {"type": "set-role", "role": "helper", "pairWithUID": asker.uid})

    assert newcomer_tx.messages("paired") == [{"type": "paired", "pairedWithUID": asker.uid, "role": "helper"}]
    assert deps.sessions.get(asker.uid).paired_with == newcomer.uid
    assert deps.sessions.get(helper.uid).paired_with is None
