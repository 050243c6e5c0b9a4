"""Unit tests for cmdtarget.resolver.annotation: marker-driven target resolution."""
from __future__ import annotations

import threading
import uuid

import pytest

from cmdtarget import (
    AnnotationCommandTargetResolver,
    BuilderReusedError,
    GenericCommandMessage,
    InvalidCommandTargetError,
    InvalidTargetMemberError,
    InvalidVersionError,
    MissingTargetError,
    ResolverConfig,
    TargetAggregateIdentifier,
    TargetAggregateVersion,
    TargetExtractionError,
    VersionedAggregateIdentifier,
    create_resolver,
)
from cmdtarget.resolver.annotation import find_marked_member
from cmdtarget.shape import MemberKind

from sample_commands import (
    ChildWithMarkedField,
    CustomMethodAnnotatedCommand,
    CustomTargetAggregateIdentifier,
    CustomTargetAggregateVersion,
    ExplodingIdentifierCommand,
    FieldAnnotatedCommand,
    FieldCustomAnnotatedCommand,
    FieldMetaAnnotatedCommand,
    ForwardEvent,
    IdentifierOnlyCommand,
    MetaMethodAnnotatedCommand,
    MetaTargetAggregateIdentifier,
    MethodAndFieldCommand,
    MethodAnnotatedCommand,
    MixedSourcesCommand,
    NoMarkerCommand,
    ParameterizedIdentifierCommand,
    PropertyIdentifierCommand,
    RenameAccount,
    StaticIdentifierCommand,
    TypeCheckingOnlyCommand,
    UnassignedFieldCommand,
    VoidIdentifierCommand,
)


@pytest.fixture()
def resolver() -> AnnotationCommandTargetResolver:
    return AnnotationCommandTargetResolver()


def _custom_resolver() -> AnnotationCommandTargetResolver:
    return (
        AnnotationCommandTargetResolver.builder()
        .with_identifier_marker(CustomTargetAggregateIdentifier)
        .with_version_marker(CustomTargetAggregateVersion)
        .build()
    )


# ===========================================================================
# Missing targets
# ===========================================================================


class TestMissingTarget:
    def test_payload_without_markers_fails(self, resolver: AnnotationCommandTargetResolver) -> None:
        with pytest.raises(MissingTargetError):
            resolver.resolve("That won't work")

    def test_message_names_payload_type(self, resolver: AnnotationCommandTargetResolver) -> None:
        with pytest.raises(MissingTargetError, match=r"\[str\]"):
            resolver.resolve("That won't work")

    def test_error_carries_payload_type(self, resolver: AnnotationCommandTargetResolver) -> None:
        with pytest.raises(MissingTargetError) as exc_info:
            resolver.resolve(NoMarkerCommand("order-1"))
        assert exc_info.value.payload_type is NoMarkerCommand

    def test_non_marker_annotation_metadata_is_ignored(
        self, resolver: AnnotationCommandTargetResolver
    ) -> None:
        with pytest.raises(MissingTargetError):
            resolver.resolve(NoMarkerCommand("order-1"))

    def test_none_field_value_fails(self, resolver: AnnotationCommandTargetResolver) -> None:
        with pytest.raises(MissingTargetError):
            resolver.resolve(FieldAnnotatedCommand(None))

    def test_empty_identifier_fails(self, resolver: AnnotationCommandTargetResolver) -> None:
        with pytest.raises(MissingTargetError):
            resolver.resolve(FieldAnnotatedCommand(""))

    def test_unassigned_field_counts_as_missing(
        self, resolver: AnnotationCommandTargetResolver
    ) -> None:
        with pytest.raises(MissingTargetError):
            resolver.resolve(UnassignedFieldCommand())

    def test_is_invalid_command_target(self, resolver: AnnotationCommandTargetResolver) -> None:
        with pytest.raises(InvalidCommandTargetError):
            resolver.resolve(object())

    def test_missing_target_is_value_error(self, resolver: AnnotationCommandTargetResolver) -> None:
        with pytest.raises(ValueError):
            resolver.resolve(object())


# ===========================================================================
# Method-marked payloads
# ===========================================================================


class TestAnnotatedMethods:
    def test_identifier_only(self, resolver: AnnotationCommandTargetResolver) -> None:
        aggregate_identifier = uuid.uuid4()
        actual = resolver.resolve(IdentifierOnlyCommand(aggregate_identifier))
        assert actual.identifier == str(aggregate_identifier)
        assert actual.version is None

    def test_identifier_and_version(self, resolver: AnnotationCommandTargetResolver) -> None:
        aggregate_identifier = uuid.uuid4()
        actual = resolver.resolve(MethodAnnotatedCommand(aggregate_identifier, 1))
        assert actual.identifier == str(aggregate_identifier)
        assert actual.version == 1

    def test_string_version_is_parsed(self, resolver: AnnotationCommandTargetResolver) -> None:
        actual = resolver.resolve(MethodAnnotatedCommand(uuid.uuid4(), "1000230"))
        assert actual.version == 1000230

    def test_void_identifier_method_fails(self, resolver: AnnotationCommandTargetResolver) -> None:
        with pytest.raises(InvalidTargetMemberError) as exc_info:
            resolver.resolve(VoidIdentifierCommand())
        assert "get_identifier" in exc_info.value.member

    def test_accessor_with_parameters_fails(
        self, resolver: AnnotationCommandTargetResolver
    ) -> None:
        with pytest.raises(InvalidTargetMemberError, match="prefix"):
            resolver.resolve(ParameterizedIdentifierCommand())

    def test_raising_accessor_is_wrapped(self, resolver: AnnotationCommandTargetResolver) -> None:
        with pytest.raises(TargetExtractionError) as exc_info:
            resolver.resolve(ExplodingIdentifierCommand())
        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert exc_info.value.original is exc_info.value.__cause__

    def test_property_accessor(self, resolver: AnnotationCommandTargetResolver) -> None:
        assert resolver.resolve(PropertyIdentifierCommand("prop-1")).identifier == "prop-1"

    def test_static_accessor(self, resolver: AnnotationCommandTargetResolver) -> None:
        assert resolver.resolve(StaticIdentifierCommand()).identifier == "static-id"


# ===========================================================================
# Field-marked payloads
# ===========================================================================


class TestAnnotatedFields:
    def test_uuid_identifier_and_long_version(
        self, resolver: AnnotationCommandTargetResolver
    ) -> None:
        aggregate_identifier = uuid.uuid4()
        actual = resolver.resolve(FieldAnnotatedCommand(aggregate_identifier, 1))
        assert actual.identifier == str(aggregate_identifier)
        assert actual.version == 1

    def test_object_identifier_uses_its_string_form(
        self, resolver: AnnotationCommandTargetResolver
    ) -> None:
        aggregate_identifier = object()
        actual = resolver.resolve(FieldAnnotatedCommand(aggregate_identifier, 1))
        assert actual.identifier == str(aggregate_identifier)

    def test_parsable_version(self, resolver: AnnotationCommandTargetResolver) -> None:
        actual = resolver.resolve(FieldAnnotatedCommand(uuid.uuid4(), "1"))
        assert actual.version == 1

    def test_non_numeric_version_fails(self, resolver: AnnotationCommandTargetResolver) -> None:
        with pytest.raises(InvalidVersionError):
            resolver.resolve(FieldAnnotatedCommand(uuid.uuid4(), "abc"))

    def test_float_version_is_truncated(self, resolver: AnnotationCommandTargetResolver) -> None:
        assert resolver.resolve(FieldAnnotatedCommand("a", 7.9)).version == 7

    def test_none_version_is_absent(self, resolver: AnnotationCommandTargetResolver) -> None:
        assert resolver.resolve(FieldAnnotatedCommand("a", None)).version is None

    def test_inherited_field(self, resolver: AnnotationCommandTargetResolver) -> None:
        actual = resolver.resolve(RenameAccount("acc-1", "Savings", 4))
        assert actual == VersionedAggregateIdentifier("acc-1", 4)


# ===========================================================================
# Discovery order
# ===========================================================================


class TestDiscoveryOrder:
    def test_method_takes_precedence_over_field(
        self, resolver: AnnotationCommandTargetResolver
    ) -> None:
        actual = resolver.resolve(MethodAndFieldCommand("from-field"))
        assert actual.identifier == "from-method"

    def test_inherited_method_beats_own_field(
        self, resolver: AnnotationCommandTargetResolver
    ) -> None:
        actual = resolver.resolve(ChildWithMarkedField("from-child-field"))
        assert actual.identifier == "from-parent-method"

    def test_identifier_from_field_and_version_from_method(
        self, resolver: AnnotationCommandTargetResolver
    ) -> None:
        actual = resolver.resolve(MixedSourcesCommand("acc-9", "12"))
        assert actual == VersionedAggregateIdentifier("acc-9", 12)

    def test_find_marked_member_reports_kind(self) -> None:
        member = find_marked_member(MixedSourcesCommand, TargetAggregateVersion)
        assert member is not None
        assert member.kind is MemberKind.METHOD
        member = find_marked_member(MixedSourcesCommand, TargetAggregateIdentifier)
        assert member is not None
        assert member.kind is MemberKind.FIELD

    def test_find_marked_member_returns_none(self) -> None:
        assert find_marked_member(NoMarkerCommand, TargetAggregateIdentifier) is None


# ===========================================================================
# Awkward payload shapes
# ===========================================================================


class TestAwkwardShapes:
    def test_unresolvable_neighbour_annotation_keeps_markers(
        self, resolver: AnnotationCommandTargetResolver
    ) -> None:
        actual = resolver.resolve(TypeCheckingOnlyCommand("order-1", expected_version=2))
        assert actual == VersionedAggregateIdentifier("order-1", 2)

    def test_payload_with_envelope_like_fields_is_wrapped(
        self, resolver: AnnotationCommandTargetResolver
    ) -> None:
        actual = resolver.resolve(ForwardEvent("agg-1", "text"))
        assert actual == VersionedAggregateIdentifier("agg-1")

    def test_envelope_like_payload_inside_message(
        self, resolver: AnnotationCommandTargetResolver
    ) -> None:
        message = GenericCommandMessage(ForwardEvent("agg-2", "text"))
        assert resolver.resolve(message).identifier == "agg-2"


# ===========================================================================
# Meta-markers and custom markers
# ===========================================================================


class TestMetaMarkers:
    def test_meta_markers_on_methods(self, resolver: AnnotationCommandTargetResolver) -> None:
        aggregate_identifier = uuid.uuid4()
        version = 98765432109
        actual = resolver.resolve(MetaMethodAnnotatedCommand(aggregate_identifier, version))
        assert actual.identifier == str(aggregate_identifier)
        assert actual.version == version

    def test_meta_markers_on_fields(self, resolver: AnnotationCommandTargetResolver) -> None:
        aggregate_identifier = uuid.uuid4()
        version = 98765432109
        actual = resolver.resolve(FieldMetaAnnotatedCommand(aggregate_identifier, version))
        assert actual.identifier == str(aggregate_identifier)
        assert actual.version == version

    def test_meta_and_direct_markers_resolve_identically(
        self, resolver: AnnotationCommandTargetResolver
    ) -> None:
        aggregate_identifier = uuid.uuid4()
        direct = resolver.resolve(FieldAnnotatedCommand(aggregate_identifier, 3))
        meta = resolver.resolve(FieldMetaAnnotatedCommand(aggregate_identifier, 3))
        assert direct == meta

    def test_meta_marker_does_not_match_in_reverse(self) -> None:
        meta_resolver = create_resolver(
            ResolverConfig(identifier_marker=MetaTargetAggregateIdentifier)
        )
        with pytest.raises(MissingTargetError):
            meta_resolver.resolve(FieldAnnotatedCommand("id-1"))


class TestCustomMarkers:
    def test_custom_markers_on_methods(self) -> None:
        aggregate_identifier = uuid.uuid4()
        actual = _custom_resolver().resolve(
            CustomMethodAnnotatedCommand(aggregate_identifier, 98765432109)
        )
        assert actual.identifier == str(aggregate_identifier)
        assert actual.version == 98765432109

    def test_custom_markers_on_fields(self) -> None:
        aggregate_identifier = uuid.uuid4()
        actual = _custom_resolver().resolve(
            FieldCustomAnnotatedCommand(aggregate_identifier, 98765432109)
        )
        assert actual.identifier == str(aggregate_identifier)
        assert actual.version == 98765432109

    def test_custom_resolver_ignores_builtin_markers(self) -> None:
        with pytest.raises(MissingTargetError, match="CustomTargetAggregateIdentifier"):
            _custom_resolver().resolve(FieldAnnotatedCommand("id-1"))

    def test_create_resolver_from_config(self) -> None:
        resolver = create_resolver(
            ResolverConfig(
                identifier_marker=CustomTargetAggregateIdentifier,
                version_marker=CustomTargetAggregateVersion,
            )
        )
        actual = resolver.resolve(FieldCustomAnnotatedCommand("id-2", "5"))
        assert actual == VersionedAggregateIdentifier("id-2", 5)

    def test_create_resolver_defaults(self) -> None:
        resolver = create_resolver()
        assert resolver.identifier_marker is TargetAggregateIdentifier
        assert resolver.version_marker is TargetAggregateVersion


# ===========================================================================
# Builder
# ===========================================================================


class TestBuilder:
    def test_default_builder_uses_builtin_markers(self) -> None:
        resolver = AnnotationCommandTargetResolver.builder().build()
        assert resolver.identifier_marker is TargetAggregateIdentifier
        assert resolver.version_marker is TargetAggregateVersion

    def test_second_build_fails(self) -> None:
        builder = (
            AnnotationCommandTargetResolver.builder()
            .with_identifier_marker(CustomTargetAggregateIdentifier)
            .with_version_marker(CustomTargetAggregateVersion)
        )
        first = builder.build()
        with pytest.raises(BuilderReusedError):
            builder.build()
        actual = first.resolve(FieldCustomAnnotatedCommand("still-works", 2))
        assert actual == VersionedAggregateIdentifier("still-works", 2)

    def test_setter_after_build_fails(self) -> None:
        builder = AnnotationCommandTargetResolver.builder()
        builder.build()
        with pytest.raises(BuilderReusedError):
            builder.with_identifier_marker(CustomTargetAggregateIdentifier)

    def test_builder_misuse_is_not_a_target_error(self) -> None:
        builder = AnnotationCommandTargetResolver.builder()
        builder.build()
        with pytest.raises(BuilderReusedError) as exc_info:
            builder.build()
        assert not isinstance(exc_info.value, InvalidCommandTargetError)
        assert isinstance(exc_info.value, RuntimeError)

    def test_repr_mentions_markers(self) -> None:
        resolver = _custom_resolver()
        assert "CustomTargetAggregateIdentifier" in repr(resolver)
        assert "CustomTargetAggregateVersion" in repr(resolver)


# ===========================================================================
# Command messages and sharing
# ===========================================================================


class TestCommandMessages:
    def test_resolve_target_accepts_message(
        self, resolver: AnnotationCommandTargetResolver
    ) -> None:
        message = GenericCommandMessage(FieldAnnotatedCommand("id-3", 1))
        assert resolver.resolve_target(message) == VersionedAggregateIdentifier("id-3", 1)

    def test_resolve_accepts_message(self, resolver: AnnotationCommandTargetResolver) -> None:
        message = GenericCommandMessage(FieldAnnotatedCommand("id-4"))
        assert resolver.resolve(message).identifier == "id-4"

    def test_resolver_is_shareable_across_threads(
        self, resolver: AnnotationCommandTargetResolver
    ) -> None:
        results: dict[int, VersionedAggregateIdentifier] = {}

        def work(n: int) -> None:
            results[n] = resolver.resolve(FieldAnnotatedCommand(f"agg-{n}", n))

        threads = [threading.Thread(target=work, args=(n,)) for n in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        assert results == {n: VersionedAggregateIdentifier(f"agg-{n}", n) for n in range(8)}
