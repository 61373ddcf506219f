"""Unit tests for Container."""

import logging
import threading
import time
from typing import Protocol
from unittest.mock import Mock

import pytest

from entrywire.application.container import Container
from entrywire.application.context_registry import ContextBuilder
from entrywire.domain import (
    ContainerOptions,
    DuplicateEntryError,
    EntryNotFoundError,
    IContainer,
    Injected,
    Injecting,
    InjectionError,
    InvalidInstanceError,
    Lifetime,
    Resolved,
    ResolverNotFoundError,
    Resolving,
)
from entrywire.infrastructure.testing import RecordingObserver


class Database:
    pass


class Repository:
    def __init__(self, db: Database):
        self.db = db


class Greeter:
    def __init__(self, name: str = "World"):
        self.name = name


class Sender(Protocol):
    def send(self, message: str) -> None: ...


class TestContainerInitialization:
    """Test cases for Container initialization."""

    def test_container_implements_interface(self):
        """Test that Container implements IContainer."""
        assert isinstance(Container(), IContainer)

    def test_default_options(self):
        """Test that a container without options uses the defaults."""
        container = Container()

        assert container.options == ContainerOptions()
        assert container.observer is None

    def test_custom_options_and_observer(self):
        """Test that the given configuration is kept."""
        options = ContainerOptions(thread_safe=True, autowire=False)
        observer = RecordingObserver()

        container = Container(options=options, observer=observer)

        assert container.options is options
        assert container.observer is observer


class TestContainerRegistration:
    """Test cases for registering entries."""

    @pytest.mark.parametrize(
        "method, lifetime",
        [("bind", Lifetime.TRANSIENT), ("scoped", Lifetime.SCOPED), ("singleton", Lifetime.SINGLETON)],
    )
    def test_registration_lifetimes(self, method, lifetime):
        """Test that each registration method stores its lifetime."""
        container = Container()

        getattr(container, method)(Database, lambda c: Database())

        assert container.get_entry(Database).lifetime == lifetime

    def test_set_defaults_to_transient(self):
        """Test the default lifetime of set."""
        container = Container()

        container.set(Database)

        assert container.get_entry(Database).lifetime == Lifetime.TRANSIENT

    def test_resolver_defaults_to_autowiring(self):
        """Test that registering without a resolver constructs the type itself."""
        container = Container()
        container.bind(Database)
        container.bind(Repository)

        repository = container.get(Repository)

        assert isinstance(repository, Repository)
        assert isinstance(repository.db, Database)

    def test_duplicate_registration_raises(self):
        """Test that a type cannot be registered twice."""
        container = Container()
        container.singleton(Database)

        with pytest.raises(DuplicateEntryError, match="Cannot register class: Database. Entry already exists."):
            container.bind(Database)

    def test_instance_registration(self):
        """Test that a registered instance is always returned."""
        container = Container()
        db = Database()

        container.instance(Database, db)

        assert container.get(Database) is db
        assert container.get_entry(Database).lifetime == Lifetime.SINGLETON

    def test_instance_of_wrong_type_raises(self):
        """Test that instances are validated when registered."""
        container = Container()

        with pytest.raises(InvalidInstanceError):
            container.instance(Database, "not a database")

        assert not container.has(Database)

    def test_instance_for_protocol(self):
        """Test that protocols accept any implementation."""
        container = Container()
        sender = Mock()

        container.instance(Sender, sender)

        assert container.get(Sender) is sender

    def test_bulk_registration(self):
        """Test registering several types with one call per lifetime."""

        class ServiceA:
            pass

        class ServiceB:
            pass

        class ServiceC:
            pass

        container = Container()
        container.register_singletons({ServiceA: lambda c: ServiceA()})
        container.register_transients({ServiceB: lambda c: ServiceB()})
        container.register_scoped({ServiceC: lambda c: ServiceC()})

        assert container.get_entry(ServiceA).lifetime == Lifetime.SINGLETON
        assert container.get_entry(ServiceB).lifetime == Lifetime.TRANSIENT
        assert container.get_entry(ServiceC).lifetime == Lifetime.SCOPED

    def test_registration_is_logged(self, caplog):
        """Test the debug record written on registration."""
        container = Container()

        with caplog.at_level(logging.DEBUG, logger="entrywire"):
            container.scoped(Database)

        assert "Registered Database as scoped" in caplog.text


class TestContainerResolution:
    """Test cases for get, make, inject and call."""

    def test_get_unregistered_raises(self):
        """Test that get never autowires."""
        with pytest.raises(EntryNotFoundError, match="Database is not registered."):
            Container().get(Database)

    def test_singleton_resolves_once(self):
        """Test that the resolver of a singleton runs once."""
        container = Container()
        resolver = Mock(side_effect=lambda c: Database())
        container.singleton(Database, resolver)

        assert container.get(Database) is container.get(Database)
        assert resolver.call_count == 1

    def test_resolver_receives_container(self):
        """Test that resolvers are called with the container."""
        container = Container()
        resolver = Mock(return_value=Database())
        container.bind(Database, resolver)

        container.get(Database)

        resolver.assert_called_once_with(container)

    def test_transient_resolves_every_time(self):
        """Test that transients are never cached."""
        container = Container()
        container.bind(Database)

        assert container.get(Database) is not container.get(Database)

    def test_resolver_returning_wrong_type_raises(self):
        """Test that resolver results are validated."""
        container = Container()
        container.bind(Database, lambda c: object())

        with pytest.raises(InvalidInstanceError, match="Expected: instance of Database. Got: object."):
            container.get(Database)

    def test_make_uses_registration(self):
        """Test that make returns the registered singleton."""
        container = Container()
        container.singleton(Database)

        assert container.make(Database) is container.get(Database)

    def test_make_autowires_unregistered_class(self):
        """Test that make constructs classes that are not registered."""
        container = Container()

        repository = container.make(Repository)

        assert isinstance(repository.db, Database)
        assert not container.has(Repository)

    def test_make_with_arguments_bypasses_cache(self):
        """Test that explicit arguments always construct a new instance."""
        container = Container()
        container.singleton(Greeter)
        cached = container.get(Greeter)

        greeter = container.make(Greeter, "Ada")

        assert greeter is not cached
        assert greeter.name == "Ada"
        assert container.get(Greeter) is cached

    def test_inject_ignores_registration(self):
        """Test that inject always constructs."""
        container = Container()
        container.singleton(Database)

        assert container.inject(Database) is not container.get(Database)

    def test_registered_dependency_is_shared(self):
        """Test that autowired parameters use registered entries."""
        container = Container()
        container.singleton(Database)

        assert container.make(Repository).db is container.get(Database)

    def test_call_injects_arguments(self):
        """Test that call autowires function parameters."""
        container = Container()
        container.singleton(Database)

        def handler(db: Database, suffix: str = "!"):
            return db, suffix

        db, suffix = container.call(handler)

        assert db is container.get(Database)
        assert suffix == "!"

    def test_call_with_explicit_arguments(self):
        """Test that call forwards explicit arguments."""

        def handler(name: str, db: Database):
            return f"{name}:{type(db).__name__}"

        assert Container().call(handler, "Ada") == "Ada:Database"

    def test_autowire_disabled(self):
        """Test that unregistered dependencies fail without autowiring."""
        container = Container(options=ContainerOptions(autowire=False))

        with pytest.raises(InjectionError, match="cannot be resolved"):
            container.make(Repository)

        container.bind(Database)
        assert isinstance(container.make(Repository).db, Database)


class TestContainerExtension:
    """Test cases for extend."""

    def test_extend_returns_container(self):
        """Test that extend can be chained."""
        container = Container()

        assert container.extend(Database, lambda db, c: db) is container

    def test_extend_before_registration(self):
        """Test that extenders registered first apply once a resolver exists."""
        container = Container()
        calls = []
        container.extend(Database, lambda db, c: calls.append("extended") or db)

        container.bind(Database)
        container.get(Database)

        assert calls == ["extended"]

    def test_extend_only_entry_raises(self):
        """Test that a type that was only extended cannot be resolved."""
        container = Container()
        container.extend(Database, lambda db, c: db)

        assert container.has(Database)
        with pytest.raises(ResolverNotFoundError):
            container.get(Database)
        with pytest.raises(ResolverNotFoundError):
            container.make(Database)

    def test_extend_only_dependency_raises_during_autowiring(self):
        """Test that autowiring does not bypass an extend-only entry."""
        container = Container()
        container.extend(Database, lambda db, c: db)

        with pytest.raises(ResolverNotFoundError):
            container.make(Repository)


class TestContainerRemoval:
    """Test cases for unset, pull, clear_scoped and clear."""

    def test_has_and_unset(self):
        """Test that unset removes the entry."""
        container = Container()
        container.bind(Database)

        assert container.has(Database)
        assert container.unset(Database) is True
        assert not container.has(Database)
        assert container.unset(Database) is False

    def test_pull(self):
        """Test that pull resolves once and forgets the entry."""
        container = Container()
        container.singleton(Database)

        db = container.pull(Database)

        assert isinstance(db, Database)
        assert not container.has(Database)

    def test_clear_scoped(self):
        """Test that clearing scoped instances keeps singletons."""
        container = Container()
        container.scoped(Database)
        container.singleton(Greeter)
        scoped = container.get(Database)
        singleton = container.get(Greeter)

        assert container.clear_scoped() == 1
        assert container.get(Database) is not scoped
        assert container.get(Greeter) is singleton

    def test_clear(self):
        """Test that clear removes registrations and contexts."""
        container = Container()
        container.singleton(Database)
        container.when_resolving(Greeter).pass_argument("name", "Ada")

        container.clear()

        assert not container.has(Database)
        assert container.make(Greeter).name == "World"

    def test_registry_copy_is_independent(self):
        """Test that copies of the registry do not share caches."""
        container = Container()
        container.singleton(Database)
        original = container.get(Database)

        copy = container.get_registry_copy()

        assert copy.has(Database)
        assert copy.get(Database).cached_instance is None
        assert container.get(Database) is original


class TestContainerScope:
    """Test cases for create_scope."""

    def test_scope_has_its_own_scoped_instances(self):
        """Test that each scope caches its own scoped instance."""
        container = Container()
        container.scoped(Database)
        outer = container.get(Database)
        first = container.create_scope()
        second = container.create_scope()

        assert first.get(Database) is first.get(Database)
        assert first.get(Database) is not second.get(Database)
        assert first.get(Database) is not outer

    def test_scope_shares_singletons(self):
        """Test that singletons resolved in a scope are cached for the parent too."""
        container = Container()
        container.singleton(Greeter)
        scope = container.create_scope()

        assert scope.get(Greeter) is container.get(Greeter)

    def test_clearing_scope_leaves_parent_alone(self):
        """Test that clear_scoped on a scope does not touch the parent cache."""
        container = Container()
        container.scoped(Database)
        outer = container.get(Database)
        scope = container.create_scope()
        scope.get(Database)

        assert scope.clear_scoped() == 1
        assert container.get(Database) is outer

    def test_scope_registrations_stay_in_scope(self):
        """Test that registrations and contexts made in a scope do not reach the parent."""
        container = Container()
        container.when_resolving(Greeter).pass_argument("name", "Ada")
        scope = container.create_scope()
        scope.bind(Database)
        scope.when_resolving(Greeter).pass_argument("name", "Grace")

        assert not container.has(Database)
        assert container.make(Greeter).name == "Ada"
        assert scope.make(Greeter).name == "Grace"


class TestContainerContexts:
    """Test cases for when_resolving."""

    def test_when_resolving_returns_builder(self):
        """Test that when_resolving starts a fluent builder."""
        assert isinstance(Container().when_resolving(Greeter), ContextBuilder)

    def test_context_applies_to_consumer(self):
        """Test that context arguments reach the bound consumer."""
        container = Container()
        container.when_resolving(Greeter).pass_argument("name", "Ada")

        assert container.make(Greeter).name == "Ada"

    def test_context_copy(self):
        """Test that the context copy is independent."""
        container = Container()
        container.when_resolving(Greeter).pass_argument("name", "Ada")

        copy = container.get_context_copy()
        copy.clear()

        assert container.make(Greeter).name == "Ada"


class TestContainerObserver:
    """Test cases for observer notifications."""

    def test_explicit_resolver_notifies_resolution_only(self):
        """Test the events of resolving an entry with its own resolver."""
        observer = RecordingObserver()
        container = Container(observer=observer)
        container.bind(Database, lambda c: Database())

        instance = container.get(Database)

        assert observer.events == [
            Resolving(dependency_type=Database, lifetime=Lifetime.TRANSIENT),
            Resolved(dependency_type=Database, lifetime=Lifetime.TRANSIENT, instance=instance, was_cached=False),
        ]

    def test_default_resolver_notifies_injection(self):
        """Test that the default resolver injects between the resolution events."""
        observer = RecordingObserver()
        container = Container(observer=observer)
        container.singleton(Database)

        container.get(Database)

        assert [type(event) for event in observer.events] == [Resolving, Injecting, Injected, Resolved]
        assert observer.of_type(Resolved)[0].was_cached is True

    def test_cache_hits_do_not_notify(self):
        """Test that only cache misses are observed."""
        observer = RecordingObserver()
        container = Container(observer=observer)
        container.singleton(Database, lambda c: Database())
        container.get(Database)
        observer.clear()

        container.get(Database)
        container.make(Database)

        assert observer.events == []

    def test_inject_notifies(self):
        """Test the events of a direct injection."""
        observer = RecordingObserver()
        container = Container(observer=observer)

        repository = container.inject(Repository)

        assert observer.of_type(Injecting) == [Injecting(target=Repository), Injecting(target=Database)]
        assert observer.of_type(Injected)[-1].instance is repository


class TestContainerThreadSafety:
    """Test cases for the thread_safe option."""

    def test_singleton_is_created_once_across_threads(self):
        """Test that concurrent first resolutions share one instance."""
        container = Container(options=ContainerOptions(thread_safe=True))
        created = []

        def build(c):
            time.sleep(0.01)
            created.append(1)
            return Database()

        container.singleton(Database, build)
        results = []
        barrier = threading.Barrier(8)

        def worker():
            barrier.wait()
            results.append(container.get(Database))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(created) == 1
        assert all(result is results[0] for result in results)

    def test_thread_safe_container_is_reentrant(self):
        """Test that resolvers may call back into a locked container."""
        container = Container(options=ContainerOptions(thread_safe=True))
        container.singleton(Database)
        container.bind(Repository, lambda c: Repository(c.get(Database)))

        assert container.get(Repository).db is container.get(Database)
