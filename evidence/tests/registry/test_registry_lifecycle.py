# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Registration lifecycle, freezing, teardown and concurrent reads."""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from evidence.errors import ErasureCollision, NotFound, RegistryClosed, RegistryFrozen
from evidence.erasure import ErasedPolicy
from evidence.registry import CapabilityRegistry, RegistrationState


def test_handle_tracks_active_then_removed() -> None:
	reg = CapabilityRegistry()
	handle = reg.register("Closeable", "String", "close")
	assert handle.state is RegistrationState.ACTIVE
	assert handle in reg
	handle.unregister()
	assert handle.state is RegistrationState.REMOVED
	assert handle not in reg


def test_unregister_is_idempotent() -> None:
	reg = CapabilityRegistry()
	handle = reg.register("Closeable", "String", "close")
	reg.unregister(handle)
	reg.unregister(handle)
	reg.unregister(handle.registration_id)
	assert len(reg) == 0


def test_unregister_unknown_id_is_an_error() -> None:
	reg = CapabilityRegistry()
	with pytest.raises(KeyError):
		reg.unregister(42)


def test_handle_context_manager_unregisters_on_exit() -> None:
	reg = CapabilityRegistry()
	with reg.register("Closeable", "String", "close") as handle:
		assert reg.resolve("Closeable", "x") == "close"
	assert handle.state is RegistrationState.REMOVED
	with pytest.raises(NotFound):
		reg.resolve("Closeable", "x")


def test_descriptor_can_be_reused_after_unregister() -> None:
	reg = CapabilityRegistry(policy=ErasedPolicy())
	first = reg.register("Closeable", "List<Int>", "ints")
	with pytest.raises(ErasureCollision):
		reg.register("Closeable", "List<String>", "strings")
	first.unregister()
	reg.register("Closeable", "List<String>", "strings")
	assert reg.resolve("Closeable", ["a"]) == "strings"


def test_failed_registration_never_becomes_active() -> None:
	reg = CapabilityRegistry()
	reg.register("Closeable", "String", "a")
	with pytest.raises(ValueError):
		reg.register("Closeable", "String", "b")
	assert [r.implementation for r in reg.registrations()] == ["a"]


def test_frozen_registry_rejects_writes_but_resolves() -> None:
	reg = CapabilityRegistry()
	handle = reg.register("Closeable", "String", "close")
	assert reg.freeze() is reg
	assert reg.frozen
	with pytest.raises(RegistryFrozen):
		reg.register("Closeable", "Int", "close-int")
	with pytest.raises(RegistryFrozen):
		reg.unregister(handle)
	with pytest.raises(RegistryFrozen):
		reg.declare_subtype("Int", "Number")
	assert handle.state is RegistrationState.ACTIVE
	assert reg.resolve("Closeable", "x") == "close"


def test_close_removes_everything_and_is_idempotent() -> None:
	reg = CapabilityRegistry()
	handle = reg.register("Closeable", "String", "close")
	reg.freeze()
	reg.close()
	reg.close()
	assert reg.closed
	assert len(reg) == 0
	assert handle.state is RegistrationState.REMOVED
	# Already removed: unregistering is still a no-op after teardown.
	handle.unregister()
	with pytest.raises(NotFound):
		reg.resolve("Closeable", "x")
	with pytest.raises(RegistryClosed):
		reg.register("Closeable", "Int", "close-int")
	with pytest.raises(RegistryClosed):
		reg.freeze()


def test_registry_context_manager_tears_down() -> None:
	with CapabilityRegistry() as reg:
		handle = reg.register("Closeable", "String", "close")
	assert reg.closed
	assert handle.state is RegistrationState.REMOVED


def test_declare_subtype_through_registry() -> None:
	reg = CapabilityRegistry()
	reg.register("Show", "Number", "show-number")
	reg.declare_subtype("Int", "Number")
	assert reg.resolve("Show", 1) == "show-number"


def test_concurrent_registration_is_serialized() -> None:
	reg = CapabilityRegistry()
	names = [f"app:Type{i}" for i in range(200)]
	with ThreadPoolExecutor(max_workers=8) as pool:
		handles = list(pool.map(lambda n: reg.register("Show", n, n), names))
	assert len(reg) == 200
	assert len({h.registration_id for h in handles}) == 200
	assert sorted(r.implementation for r in reg.registrations("Show")) == sorted(names)


def test_frozen_registry_serves_concurrent_readers() -> None:
	reg = CapabilityRegistry()
	reg.register("SettableParameter", "String", "string")
	reg.register("SettableParameter", "Int", "int")
	reg.freeze()

	values = ["a", 1, "b", 2] * 250
	barrier = threading.Barrier(4)

	def work(chunk: list) -> list:
		barrier.wait()
		return [reg.resolve("SettableParameter", v) for v in chunk]

	chunks = [values[i::4] for i in range(4)]
	with ThreadPoolExecutor(max_workers=4) as pool:
		results = list(pool.map(work, chunks))
	for chunk, out in zip(chunks, results):
		assert out == ["string" if isinstance(v, str) else "int" for v in chunk]


def test_readers_see_a_consistent_snapshot_during_writes() -> None:
	reg = CapabilityRegistry()
	reg.register("Show", "String", "string")
	stop = threading.Event()
	errors: list[BaseException] = []

	def reader() -> None:
		while not stop.is_set():
			try:
				assert reg.resolve("Show", "x") == "string"
			except BaseException as err:  # collected and re-checked below
				errors.append(err)
				return

	t = threading.Thread(target=reader)
	t.start()
	try:
		for i in range(200):
			reg.register("Show", f"app:Type{i}", i).unregister()
	finally:
		stop.set()
		t.join()
	assert errors == []
