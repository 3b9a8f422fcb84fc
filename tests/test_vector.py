"""
Tests for cvector.vector module.

Tests cover:
- Creation shape for V1 and V2
- Extend / parse semantics, including malformed input
- Increment sequencing, overflow and the length ceiling
- Immutability idempotence across increment, extend and spin
- Uniqueness of concurrent increments
"""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from cvector import (
    MAX_EXTENSION,
    CorrelationVector,
    InvalidExtensionError,
    InvalidFormatError,
    InvalidVersionError,
    Version,
    create,
    extend,
    parse,
    spin,
)


V1_NEAR_FULL = "tul4NUsfs9Cl7mOf.2147483647.2147483647.2147483647.21474836479"
V2_NEAR_FULL = (
    "KZY+dsX2jEaZesgCPjJ2Ng.2147483647.2147483647.2147483647.2147483647.2147483647"
    ".2147483647.2147483647.2147483647.2147483647.214"
)


class TestCreate:
    """Tests for fresh vectors."""

    def test_new_defaults_to_v1(self):
        vector = CorrelationVector.new()
        parts = vector.value.split(".")

        assert len(parts) == 2
        assert len(parts[0]) == 16
        assert parts[1] == "0"
        assert vector.version is Version.V1

    @pytest.mark.parametrize("version,base_length", [(Version.V1, 16), (Version.V2, 22)])
    def test_create_shape(self, version, base_length):
        vector = create(version).unwrap()
        parts = vector.value.split(".")

        assert len(parts) == 2
        assert len(parts[0]) == base_length
        assert parts[1] == "0"
        assert vector.version is version
        assert vector.is_immutable is False

    def test_create_then_increment(self):
        vector = create(Version.V2).unwrap()
        parts = vector.increment().split(".")

        assert len(parts) == 2
        assert parts[1] == "1"

    def test_create_accepts_int_version(self):
        assert create(2).unwrap().version is Version.V2

    def test_create_invalid_version(self):
        result = create(3)

        assert result.is_err()
        assert isinstance(result.error, InvalidVersionError)
        assert result.error.context.operation == "create"

    def test_bases_differ(self):
        assert CorrelationVector.new().base_vector != CorrelationVector.new().base_vector


class TestExtend:
    """Tests for extending an incoming vector."""

    def test_extend_v1(self):
        result = extend("tul4NUsfs9Cl7mOf.1")
        vector = result.unwrap()

        assert result.warning is None
        assert vector.value == "tul4NUsfs9Cl7mOf.1.0"
        assert vector.increment() == "tul4NUsfs9Cl7mOf.1.1"
        assert vector.value == "tul4NUsfs9Cl7mOf.1.1"

    def test_extend_v2(self):
        vector = extend("KZY+dsX2jEaZesgCPjJ2Ng.1").unwrap()

        assert vector.version is Version.V2
        assert vector.value == "KZY+dsX2jEaZesgCPjJ2Ng.1.0"
        assert vector.increment() == "KZY+dsX2jEaZesgCPjJ2Ng.1.1"

    def test_extend_empty_is_lenient(self):
        result = extend("")

        assert result.is_ok()
        assert result.unwrap().value == ".0"
        assert isinstance(result.warning, InvalidFormatError)

    def test_extend_empty_strict_fails(self):
        result = extend("", validate=True)

        assert result.is_err()
        assert isinstance(result.error, InvalidFormatError)

    @pytest.mark.parametrize("incoming", ["tul4NUsfs9Cl7mO.1", "tul4NUsfs9Cl7mOfN/dupsl.1"])
    def test_extend_bad_base_length(self, incoming):
        lenient = extend(incoming)
        assert lenient.unwrap().value == incoming + ".0"
        assert lenient.has_warning()
        assert lenient.unwrap().version is Version.V1

        strict = extend(incoming, validate=True)
        assert strict.is_err()

    @pytest.mark.parametrize(
        "incoming",
        [
            "tul4NUsfs9Cl7mOf.2147483647.2147483647.2147483647.2147483647.2147483647",
            "KZY+dsX2jEaZesgCPjJ2Ng.2147483647.2147483647.2147483647.2147483647.2147483647"
            ".2147483647.2147483647.2147483647.2147483647.2147483647",
            "tul4NUsfs9Cl7mOf.11111111111111111111111111111",
        ],
    )
    def test_extend_strict_rejects(self, incoming):
        result = extend(incoming, validate=True)

        assert result.is_err()
        assert isinstance(result.error, InvalidFormatError)
        assert result.error.context.operation == "extend"

    def test_extend_over_max_length_v1(self):
        base = "tul4NUsfs9Cl7mOf.2147483647.2147483647.2147483647.214748364.23"
        vector = extend(base).unwrap()

        assert vector.value == base + "!"
        assert vector.is_immutable

    def test_extend_over_max_length_v2(self):
        base = (
            "KZY+dsX2jEaZesgCPjJ2Ng.2147483647.2147483647.2147483647.2147483647.2147483647"
            ".2147483647.2147483647.2147483647.2147483647.2141"
        )
        vector = extend(base).unwrap()

        assert vector.value == base + "!"

    def test_extend_very_long_extension(self):
        result = extend("tul4NUsfs9Cl7mOf." + "1" * 5000)

        assert result.is_err()
        assert isinstance(result.error, InvalidExtensionError)

    def test_extend_logs_freeze(self, captured_logs):
        base = "tul4NUsfs9Cl7mOf.2147483647.2147483647.2147483647.214748364.23"
        extend(base)

        assert any(entry["event"] == "cv_frozen_on_extend" for entry in captured_logs)


class TestParse:
    """Tests for parsing a rendered vector."""

    def test_parse_simple(self):
        vector = parse("tul4NUsfs9Cl7mOf.1.5").unwrap()

        assert vector.base_vector == "tul4NUsfs9Cl7mOf.1"
        assert vector.extension == 5
        assert vector.version is Version.V1
        assert vector.is_immutable is False
        assert vector.increment() == "tul4NUsfs9Cl7mOf.1.6"

    def test_parse_terminated(self):
        vector = parse("tul4NUsfs9Cl7mOf.1.5!").unwrap()

        assert vector.extension == 5
        assert vector.is_immutable
        assert vector.value == "tul4NUsfs9Cl7mOf.1.5!"

    @pytest.mark.parametrize(
        "value",
        ["tul4NUsfs9Cl7mOf.x", "tul4NUsfs9Cl7mOf.-1", "tul4NUsfs9Cl7mOf.", "tul4NUsfs9Cl7mOf.!",
         "tul4NUsfs9Cl7mOf.2147483648", "tul4NUsfs9Cl7mOf.+1"],
    )
    def test_parse_invalid_extension(self, value):
        result = parse(value)

        assert result.is_err()
        assert isinstance(result.error, InvalidExtensionError)

    @pytest.mark.parametrize("value", ["", "tul4NUsfs9Cl7mOf", ".1"])
    def test_parse_without_separator(self, value):
        result = parse(value)

        assert result.is_err()
        assert isinstance(result.error, InvalidFormatError)

    def test_parse_terminated_wide_extension(self):
        value = V1_NEAR_FULL + "!"
        vector = parse(value).unwrap()

        assert vector.extension == 21474836479
        assert vector.value == value
        assert vector.increment() == value

    @pytest.mark.parametrize(
        "value",
        ["tul4NUsfs9Cl7mOf." + "1" * 5000, "tul4NUsfs9Cl7mOf." + "1" * 5000 + "!"],
        ids=["plain", "terminated"],
    )
    def test_parse_very_long_extension(self, value):
        result = parse(value)

        assert result.is_err()
        assert isinstance(result.error, InvalidExtensionError)

    def test_parse_leading_zeros(self):
        vector = parse("tul4NUsfs9Cl7mOf.000000000007").unwrap()

        assert vector.extension == 7

    def test_parse_max_extension(self):
        vector = parse(f"tul4NUsfs9Cl7mOf.{MAX_EXTENSION}").unwrap()

        assert vector.extension == MAX_EXTENSION

    def test_round_trip(self):
        extended = extend("KZY+dsX2jEaZesgCPjJ2Ng.3.7").unwrap()
        extended.increment()
        parsed = parse(extended.value).unwrap()

        assert parsed.base_vector == extended.base_vector
        assert parsed.extension == extended.extension
        assert parsed.version is extended.version
        assert parsed.value == extended.value


class TestIncrement:
    """Tests for increment sequencing and limits."""

    def test_sequential(self):
        vector = CorrelationVector.new()
        for expected in range(1, 51):
            assert vector.increment().endswith(f".{expected}")
        assert vector.extension == 50

    def test_past_max_with_terminator_v1(self):
        vector = extend(V1_NEAR_FULL).unwrap()
        vector.increment()
        assert vector.value == V1_NEAR_FULL + ".1"

        for _ in range(20):
            vector.increment()

        assert vector.value == V1_NEAR_FULL + ".9!"
        assert len(vector.value) == 64

    def test_past_max_with_terminator_v2(self):
        vector = extend(V2_NEAR_FULL).unwrap()
        vector.increment()
        assert vector.value == V2_NEAR_FULL + ".1"

        for _ in range(20):
            vector.increment()

        assert vector.value == V2_NEAR_FULL + ".9!"

    def test_frozen_value_is_stable(self):
        vector = extend(V1_NEAR_FULL).unwrap()
        outputs = [vector.increment() for _ in range(15)]

        assert outputs[8] == V1_NEAR_FULL + ".9"
        assert outputs[9:] == [V1_NEAR_FULL + ".9!"] * 6

    def test_stops_at_max_extension(self):
        vector = parse(f"tul4NUsfs9Cl7mOf.{MAX_EXTENSION}").unwrap()

        assert vector.increment() == f"tul4NUsfs9Cl7mOf.{MAX_EXTENSION}"
        assert vector.is_immutable is False

    def test_unique_across_threads(self):
        vector = extend(CorrelationVector.new().value).unwrap()
        barrier = threading.Barrier(50)

        def worker() -> list[str]:
            barrier.wait()
            return [vector.increment() for _ in range(20)]

        with ThreadPoolExecutor(max_workers=50) as pool:
            results = [value for chunk in pool.map(lambda _: worker(), range(50)) for value in chunk]

        assert len(results) == 1000
        assert len(set(results)) == 1000
        assert vector.extension == 1000

    def test_unique_across_1000_threads(self):
        vector = CorrelationVector.new()
        results: list[str] = []
        lock = threading.Lock()

        def worker() -> None:
            value = vector.increment()
            with lock:
                results.append(value)

        threads = [threading.Thread(target=worker) for _ in range(1000)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(set(results)) == 1000


class TestImmutable:
    """Terminated vectors never change."""

    @pytest.mark.parametrize(
        "value",
        [
            "tul4NUsfs9Cl7mOf.2147483647.2147483647.2147483647.21474836479.0!",
            "KZY+dsX2jEaZesgCPjJ2Ng.2147483647.2147483647.2147483647.2147483647.2147483647"
            ".2147483647.2147483647.2147483647.2147483647.214.0!",
        ],
    )
    def test_terminated_unchanged(self, value):
        assert parse(value).unwrap().increment() == value
        assert extend(value).unwrap().value == value
        assert spin(value).unwrap().value == value

    def test_repeated_operations(self):
        frozen = extend(V1_NEAR_FULL).unwrap()
        for _ in range(12):
            frozen.increment()
        value = frozen.value

        for _ in range(3):
            assert frozen.increment() == value
            assert extend(value).unwrap().value == value
            assert parse(value).unwrap().increment() == value
            assert spin(value).unwrap().value == value

    def test_constructor_freezes_oversized(self):
        vector = CorrelationVector(V1_NEAR_FULL, 10, Version.V1)

        assert vector.is_immutable
        assert vector.value == V1_NEAR_FULL + ".10!"


class TestSpin:
    """Tests for spin construction (value layout is covered in test_spin)."""

    def test_spin_shape(self):
        vector = spin("tul4NUsfs9Cl7mOf.0").unwrap()
        parts = vector.value.split(".")

        assert len(parts) == 4
        assert parts[:2] == ["tul4NUsfs9Cl7mOf", "0"]
        assert parts[2].isdigit()
        assert parts[3] == "0"
        assert vector.extension == 0

    def test_spin_strict_rejects(self):
        assert spin("", validate=True).is_err()

    def test_spin_lenient_warns(self):
        result = spin("short.0")

        assert result.is_ok()
        assert result.has_warning()

    def test_spin_oversized_freezes(self):
        vector = spin(V1_NEAR_FULL).unwrap()

        assert vector.is_immutable
        assert vector.value == V1_NEAR_FULL + "!"


class TestRepr:
    def test_str_is_value(self):
        vector = extend("tul4NUsfs9Cl7mOf.1").unwrap()
        assert str(vector) == vector.value

    def test_repr(self):
        vector = extend("tul4NUsfs9Cl7mOf.1").unwrap()
        assert repr(vector) == "CorrelationVector('tul4NUsfs9Cl7mOf.1.0', version=V1)"

    def test_direct_construction_rejects_negative_extension(self):
        with pytest.raises(InvalidExtensionError):
            CorrelationVector("tul4NUsfs9Cl7mOf", -1)
