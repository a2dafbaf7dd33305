from packages.taskboard.workspace.schema import (
    ENUM_DEFINITION_BY_NAME,
    ENUM_DEFINITIONS,
    InvitationStatus,
    Priority,
    sa_enum,
)


def test_enum_values_are_upper_case_names():
    for definition in ENUM_DEFINITIONS:
        assert all(value == value.upper() for value in definition.values)
        assert [member.name for member in definition.enum_cls] == list(definition.values)


def test_priority_has_three_levels():
    assert Priority.values() == ("LOW", "MEDIUM", "HIGH")


def test_sa_enum_uses_canonical_name_and_length():
    column_type = sa_enum(InvitationStatus)
    definition = ENUM_DEFINITION_BY_NAME["invitation_status"]

    assert column_type.name == "invitation_status"
    assert column_type.length == definition.length == len("ACCEPTED")
    assert column_type.native_enum is False
