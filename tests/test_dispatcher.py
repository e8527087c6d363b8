import asyncio
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from cqrs_ddd_pipeline.adapters.memory import InMemoryDatabase, InMemoryUnitOfWork
from cqrs_ddd_pipeline.behaviors import BehaviorRegistry, configure_pipeline
from cqrs_ddd_pipeline.caching import InMemoryCacheStore
from cqrs_ddd_pipeline.cqrs import (
    CacheInvalidatingCommand,
    CancellationToken,
    Command,
    CommandHandler,
    Dispatcher,
    HandlerRegistry,
    Query,
    QueryHandler,
    get_current_uow,
)
from cqrs_ddd_pipeline.domain import DomainEvent
from cqrs_ddd_pipeline.primitives.exceptions import (
    ConflictError,
    EntityNotFoundError,
    HandlerNotFoundError,
    ValidationError,
)
from cqrs_ddd_pipeline.validation import RuleValidator, ValidatorRegistry

from .sample import (
    CreateUserCommand,
    CreateUserHandler,
    GetProductHandler,
    GetProductQuery,
    ProductDto,
    User,
    UserCreated,
)

# --- Commands ---


@pytest.mark.asyncio()
async def test_create_user_commits_and_publishes(
    dispatcher: Dispatcher,
    database: InMemoryDatabase,
    published: list[DomainEvent],
) -> None:
    user_id = await dispatcher.send(
        CreateUserCommand(name="Ada", email="ada@example.com")
    )

    assert user_id == 1
    assert database.get(User, 1).email == "ada@example.com"
    assert [type(e) for e in published] == [UserCreated]


@pytest.mark.asyncio()
async def test_invalid_command_is_rejected_before_the_handler(
    dispatcher: Dispatcher,
    database: InMemoryDatabase,
    published: list[DomainEvent],
) -> None:
    with pytest.raises(ValidationError) as exc_info:
        await dispatcher.send(CreateUserCommand(name="", email="not-an-email"))

    assert exc_info.value.errors == {
        "Name": ["Name is required."],
        "Email": ["Email must be valid."],
    }
    assert database.count(User) == 0
    assert published == []


@pytest.mark.asyncio()
async def test_domain_error_rolls_back(
    dispatcher: Dispatcher,
    database: InMemoryDatabase,
    published: list[DomainEvent],
) -> None:
    await dispatcher.send(CreateUserCommand(name="Ada", email="ada@example.com"))

    with pytest.raises(ConflictError):
        await dispatcher.send(CreateUserCommand(name="Eve", email="ada@example.com"))

    assert database.count(User) == 1
    assert len(published) == 1


@pytest.mark.asyncio()
async def test_correlation_id_reaches_events(
    dispatcher: Dispatcher, published: list[DomainEvent]
) -> None:
    await dispatcher.send(
        CreateUserCommand(
            name="Ada", email="ada@example.com", correlation_id="corr-1"
        )
    )

    assert published[0].correlation_id == "corr-1"


@pytest.mark.asyncio()
async def test_correlation_id_is_generated_when_missing(
    dispatcher: Dispatcher, published: list[DomainEvent]
) -> None:
    command = CreateUserCommand(name="Ada", email="ada@example.com")
    assert command.correlation_id is None

    await dispatcher.send(command)

    assert published[0].correlation_id


@pytest.mark.asyncio()
async def test_cancelled_token_stops_dispatch(
    dispatcher: Dispatcher, database: InMemoryDatabase
) -> None:
    token = CancellationToken()
    token.cancel("client went away")

    with pytest.raises(asyncio.CancelledError):
        await dispatcher.send(
            CreateUserCommand(name="Ada", email="ada@example.com"), token
        )

    assert database.count(User) == 0


@pytest.mark.asyncio()
async def test_cancellation_during_handler_rolls_back(
    database: InMemoryDatabase, published: list[DomainEvent]
) -> None:
    class CancellingHandler(CreateUserHandler):
        async def handle(
            self, command: CreateUserCommand, cancellation: CancellationToken
        ) -> int:
            uow = get_current_uow()
            assert uow is not None
            await uow.repository(User).add(User.create(command.name, command.email))
            cancellation.cancel("deadline exceeded")
            await uow.save_changes(cancellation)
            return 0

    registry = HandlerRegistry()
    registry.register(CreateUserCommand, CancellingHandler)
    dispatcher = Dispatcher(
        registry, uow_factory=lambda: InMemoryUnitOfWork(database)
    )

    with pytest.raises(asyncio.CancelledError):
        await dispatcher.send(
            CreateUserCommand(name="Ada", email="ada@example.com"),
            CancellationToken(),
        )

    assert database.count(User) == 0
    assert published == []


@pytest.mark.asyncio()
async def test_nested_command_reuses_the_unit_of_work() -> None:
    seen: list[Any] = []

    class RegisterCommand(Command[int]):
        pass

    class AuditCommand(Command[int]):
        pass

    class AuditHandler(CommandHandler[int]):
        async def handle(self, command: Any, cancellation: CancellationToken) -> int:
            seen.append(get_current_uow())
            return 1

    class RegisterHandler(CommandHandler[int]):
        def __init__(self, dispatcher: Dispatcher) -> None:
            self._dispatcher = dispatcher

        async def handle(self, command: Any, cancellation: CancellationToken) -> int:
            seen.append(get_current_uow())
            return await self._dispatcher.send(AuditCommand(), cancellation) + 1

    registry = HandlerRegistry()
    registry.register(RegisterCommand, RegisterHandler)
    registry.register(AuditCommand, AuditHandler)
    uow_factory = MagicMock(side_effect=InMemoryUnitOfWork)

    def handler_factory(cls: type[Any]) -> Any:
        return cls(dispatcher) if cls is RegisterHandler else cls()

    dispatcher = Dispatcher(
        registry, uow_factory=uow_factory, handler_factory=handler_factory
    )

    assert await dispatcher.send(RegisterCommand()) == 2
    uow_factory.assert_called_once()
    assert seen[0] is seen[1]
    assert seen[0].commit_count == 1
    assert get_current_uow() is None


@pytest.mark.asyncio()
async def test_handler_not_found() -> None:
    dispatcher = Dispatcher(HandlerRegistry())

    with pytest.raises(HandlerNotFoundError, match="CreateUserCommand"):
        await dispatcher.send(CreateUserCommand(name="Ada", email="ada@example.com"))


@pytest.mark.asyncio()
async def test_send_rejects_queries(dispatcher: Dispatcher) -> None:
    with pytest.raises(TypeError):
        await dispatcher.send(GetProductQuery(id=42))  # type: ignore[arg-type]

    with pytest.raises(TypeError):
        await dispatcher.query(  # type: ignore[arg-type]
            CreateUserCommand(name="Ada", email="ada@example.com")
        )


@pytest.mark.asyncio()
async def test_handler_instance_from_factory() -> None:
    handler = MagicMock()
    handler.handle = AsyncMock(return_value=99)
    registry = HandlerRegistry()
    registry.register(CreateUserCommand, CreateUserHandler)
    dispatcher = Dispatcher(registry, handler_factory=lambda cls: handler)
    command = CreateUserCommand(name="Ada", email="ada@example.com")

    assert await dispatcher.dispatch(command) == 99

    forwarded, token = handler.handle.await_args.args
    assert forwarded.name == "Ada"
    assert forwarded.correlation_id is not None
    assert isinstance(token, CancellationToken)


@pytest.mark.asyncio()
async def test_chain_is_built_once_per_request_type() -> None:
    registry = HandlerRegistry()
    registry.register(CreateUserCommand, CreateUserHandler)
    behaviors = MagicMock(spec=BehaviorRegistry)
    behaviors.behaviors_for.return_value = []
    handler = MagicMock()
    handler.handle = AsyncMock(return_value=1)
    dispatcher = Dispatcher(
        registry, behaviors=behaviors, handler_factory=lambda cls: handler
    )

    for _ in range(3):
        await dispatcher.send(CreateUserCommand(name="Ada", email="ada@example.com"))

    behaviors.behaviors_for.assert_called_once_with(CreateUserCommand)

    dispatcher.reset()
    await dispatcher.send(CreateUserCommand(name="Ada", email="ada@example.com"))
    assert behaviors.behaviors_for.call_count == 2


# --- Queries ---


@pytest.mark.asyncio()
async def test_cacheable_query_hits_handler_once(
    dispatcher: Dispatcher,
    cache: InMemoryCacheStore,
    product_handler: GetProductHandler,
) -> None:
    first = await dispatcher.query(GetProductQuery(id=42))
    second = await dispatcher.query(GetProductQuery(id=42))

    assert first == second == ProductDto(id=42, name="Keyboard", price=49.9)
    assert product_handler.calls == 1
    (key,) = cache.keys()
    assert key.startswith("GetProductQuery_")


@pytest.mark.asyncio()
async def test_missing_entity_is_not_cached(
    dispatcher: Dispatcher,
    cache: InMemoryCacheStore,
    product_handler: GetProductHandler,
) -> None:
    for _ in range(2):
        with pytest.raises(EntityNotFoundError):
            await dispatcher.query(GetProductQuery(id=7))

    assert product_handler.calls == 2
    assert cache.keys() == []


class PositiveIdValidator(RuleValidator[GetProductQuery]):
    def __init__(self) -> None:
        super().__init__()
        self.rule_for("Id", lambda q: q.id > 0, "Id must be positive.")


@pytest.mark.asyncio()
async def test_invalid_query_never_reaches_handler_or_cache(
    dispatcher: Dispatcher,
    validators: ValidatorRegistry,
    cache: InMemoryCacheStore,
    product_handler: GetProductHandler,
) -> None:
    validators.register(GetProductQuery, PositiveIdValidator())

    with pytest.raises(ValidationError) as exc_info:
        await dispatcher.query(GetProductQuery(id=-1))

    assert exc_info.value.errors == {"Id": ["Id must be positive."]}
    assert product_handler.calls == 0
    assert cache.keys() == []


@pytest.mark.asyncio()
async def test_queries_never_open_a_unit_of_work() -> None:
    seen: list[Any] = []

    class WhoAmIQuery(Query[str]):
        pass

    class WhoAmIHandler(QueryHandler[str]):
        async def handle(self, query: Any, cancellation: CancellationToken) -> str:
            seen.append(get_current_uow())
            return "ada"

    registry = HandlerRegistry()
    registry.register(WhoAmIQuery, WhoAmIHandler)
    uow_factory = MagicMock()
    dispatcher = Dispatcher(registry, uow_factory=uow_factory)

    assert await dispatcher.query(WhoAmIQuery()) == "ada"
    assert seen == [None]
    uow_factory.assert_not_called()


# --- Cache invalidation through the dispatcher ---


class RenameProductCommand(CacheInvalidatingCommand[None]):
    id: int
    name: str
    fail: bool = False

    @property
    def cache_keys_to_invalidate(self) -> list[str]:
        return ["GetProductQuery_*"]


class RenameProductHandler(CommandHandler[None]):
    def __init__(self, catalog: dict[int, ProductDto]) -> None:
        self.catalog = catalog

    async def handle(
        self, command: RenameProductCommand, cancellation: CancellationToken
    ) -> None:
        if command.fail:
            raise ConflictError("Product was modified concurrently")
        old = self.catalog[command.id]
        self.catalog[command.id] = ProductDto(
            id=old.id, name=command.name, price=old.price
        )


@pytest.fixture
def catalog_dispatcher(
    product_handler: GetProductHandler, cache: InMemoryCacheStore
) -> Dispatcher:
    registry = HandlerRegistry()
    registry.register(GetProductQuery, GetProductHandler)
    registry.register(RenameProductCommand, RenameProductHandler)
    rename_handler = RenameProductHandler(product_handler.catalog)

    def handler_factory(cls: type[Any]) -> Any:
        return product_handler if cls is GetProductHandler else rename_handler

    return Dispatcher(
        registry,
        behaviors=configure_pipeline(cache=cache),
        uow_factory=InMemoryUnitOfWork,
        handler_factory=handler_factory,
    )


@pytest.mark.asyncio()
async def test_successful_command_invalidates_cached_queries(
    catalog_dispatcher: Dispatcher,
    cache: InMemoryCacheStore,
    product_handler: GetProductHandler,
) -> None:
    await catalog_dispatcher.query(GetProductQuery(id=42))

    await catalog_dispatcher.send(RenameProductCommand(id=42, name="Mechanical"))
    assert cache.keys() == []

    product = await catalog_dispatcher.query(GetProductQuery(id=42))
    assert product.name == "Mechanical"
    assert product_handler.calls == 2


@pytest.mark.asyncio()
async def test_failed_command_keeps_cached_queries(
    catalog_dispatcher: Dispatcher,
    cache: InMemoryCacheStore,
) -> None:
    await catalog_dispatcher.query(GetProductQuery(id=42))

    with pytest.raises(ConflictError):
        await catalog_dispatcher.send(
            RenameProductCommand(id=42, name="Mechanical", fail=True)
        )

    assert len(cache.keys()) == 1
