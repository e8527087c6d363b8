from __future__ import annotations

from typing import Any

import pytest

from cqrs_ddd_pipeline.adapters.memory import InMemoryDatabase, InMemoryUnitOfWork
from cqrs_ddd_pipeline.behaviors import BehaviorRegistry, configure_pipeline
from cqrs_ddd_pipeline.caching import InMemoryCacheStore
from cqrs_ddd_pipeline.cqrs import Dispatcher, EventDispatcher, HandlerRegistry
from cqrs_ddd_pipeline.domain import DomainEvent
from cqrs_ddd_pipeline.validation import ValidatorRegistry

from .sample import (
    CreateUserCommand,
    CreateUserHandler,
    CreateUserValidator,
    GetProductHandler,
    GetProductQuery,
    ProductDto,
    UserCreated,
)


@pytest.fixture
def database() -> InMemoryDatabase:
    return InMemoryDatabase()


@pytest.fixture
def published() -> list[DomainEvent]:
    return []


@pytest.fixture
def event_dispatcher(published: list[DomainEvent]) -> EventDispatcher:
    dispatcher: EventDispatcher = EventDispatcher()
    dispatcher.register(UserCreated, published.append)
    return dispatcher


@pytest.fixture
def validators() -> ValidatorRegistry:
    registry = ValidatorRegistry()
    registry.register(CreateUserCommand, CreateUserValidator())
    return registry


@pytest.fixture
def cache() -> InMemoryCacheStore:
    return InMemoryCacheStore()


@pytest.fixture
def product_handler() -> GetProductHandler:
    return GetProductHandler(
        {42: ProductDto(id=42, name="Keyboard", price=49.9)},
    )


@pytest.fixture
def behaviors(
    validators: ValidatorRegistry, cache: InMemoryCacheStore
) -> BehaviorRegistry:
    return configure_pipeline(validators=validators, cache=cache)


@pytest.fixture
def dispatcher(
    database: InMemoryDatabase,
    event_dispatcher: EventDispatcher,
    behaviors: BehaviorRegistry,
    product_handler: GetProductHandler,
) -> Dispatcher:
    registry = HandlerRegistry()
    registry.register(CreateUserCommand, CreateUserHandler)
    registry.register(GetProductQuery, GetProductHandler)

    def handler_factory(cls: type[Any]) -> Any:
        if cls is GetProductHandler:
            return product_handler
        return cls()

    return Dispatcher(
        registry,
        behaviors=behaviors,
        uow_factory=lambda: InMemoryUnitOfWork(database, event_dispatcher),
        handler_factory=handler_factory,
    )
