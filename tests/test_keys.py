import hashlib
import os
import subprocess
import sys
import textwrap
from typing import Any

from cqrs_ddd_pipeline.caching.keys import (
    canonical_bytes,
    content_hash,
    derive_cache_key,
    validation_cache_key,
    validation_cache_pattern,
)
from cqrs_ddd_pipeline.cqrs import CacheableQuery

from .sample import CreateUserCommand, GetProductQuery


class PinnedProductQuery(GetProductQuery):
    @property
    def cache_key(self) -> str | None:
        return f"product:{self.id}"


class TaggedQuery(CacheableQuery[list[Any]]):
    tags: frozenset[str]


class CreateUserCommand_Audit(CreateUserCommand):
    pass


def test_key_is_type_name_and_content_hash() -> None:
    key = derive_cache_key(GetProductQuery(id=42))

    expected_hash = hashlib.sha256(b'v1:{"id":42}').hexdigest()
    assert key == f"GetProductQuery_{expected_hash}"


def test_key_ignores_per_call_metadata() -> None:
    first = GetProductQuery(id=42, correlation_id="a")
    second = GetProductQuery(id=42, correlation_id="b")

    assert first.request_id != second.request_id
    assert derive_cache_key(first) == derive_cache_key(second)


def test_different_content_gives_different_keys() -> None:
    assert derive_cache_key(GetProductQuery(id=1)) != derive_cache_key(
        GetProductQuery(id=2)
    )


def test_custom_cache_key_wins() -> None:
    assert derive_cache_key(PinnedProductQuery(id=7)) == "product:7"


def test_canonical_encoding_is_order_independent() -> None:
    assert canonical_bytes({"b": 1, "a": [1, 2]}) == canonical_bytes(
        {"a": [1, 2], "b": 1}
    )
    assert canonical_bytes({"a": 1}) == b'v1:{"a":1}'


def test_content_hash_is_stable_across_instances() -> None:
    command = CreateUserCommand(name="Ada", email="ada@example.com")
    again = CreateUserCommand(name="Ada", email="ada@example.com")

    assert content_hash(command) == content_hash(again)
    assert len(content_hash(command)) == 64


def test_validation_cache_key_layout() -> None:
    command = CreateUserCommand(name="Ada", email="ada@example.com")

    key = validation_cache_key(command, "UniqueEmailValidator")

    assert key == (
        f"validation:CreateUserCommand:UniqueEmailValidator:{content_hash(command)}"
    )


def test_validation_cache_patterns() -> None:
    assert validation_cache_pattern(CreateUserCommand) == (
        "validation:CreateUserCommand:*"
    )
    assert validation_cache_pattern() == "validation:*"


def test_validation_pattern_does_not_match_similarly_named_types() -> None:
    other = CreateUserCommand_Audit(name="Ada", email="ada@example.com")
    pattern = validation_cache_pattern(CreateUserCommand).rstrip("*")

    assert not validation_cache_key(other, "UniqueEmailValidator").startswith(pattern)


# --- Set-valued content ---


def test_set_content_is_encoded_in_sorted_order() -> None:
    key = derive_cache_key(TaggedQuery(tags=frozenset({"gamma", "alpha", "beta"})))

    expected = hashlib.sha256(b'v1:{"tags":["alpha","beta","gamma"]}').hexdigest()
    assert key == f"TaggedQuery_{expected}"


def test_nested_sets_and_models_are_canonical() -> None:
    first = canonical_bytes({"outer": [{"ids": {3, 1, 2}}], "when": None})
    second = canonical_bytes({"when": None, "outer": [{"ids": {2, 3, 1}}]})

    assert first == second == b'v1:{"outer":[{"ids":[1,2,3]}],"when":null}'


DERIVE_IN_CHILD = textwrap.dedent(
    """
    from typing import Any

    from cqrs_ddd_pipeline.caching.keys import derive_cache_key
    from cqrs_ddd_pipeline.cqrs import CacheableQuery

    class TaggedQuery(CacheableQuery[list[Any]]):
        tags: frozenset[str]

    tags = frozenset({"alpha", "beta", "gamma", "delta", "epsilon"})
    print(derive_cache_key(TaggedQuery(tags=tags)))
    """
)


def test_key_is_identical_across_hash_seeds() -> None:
    keys: set[str] = set()
    for seed in ("1", "2", "3", "4", "5", "6"):
        env = {
            **os.environ,
            "PYTHONHASHSEED": seed,
            "PYTHONPATH": os.pathsep.join(sys.path),
        }
        completed = subprocess.run(
            [sys.executable, "-c", DERIVE_IN_CHILD],
            env=env,
            capture_output=True,
            text=True,
            check=True,
        )
        keys.add(completed.stdout.strip())

    assert len(keys) == 1
    assert keys.pop().startswith("TaggedQuery_")
