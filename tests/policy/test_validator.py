"""Unit tests for PolicyValidator: the policy document grammar."""

import pytest

from aclengine.exceptions import PolicySyntaxError
from aclengine.policy import PolicyValidator


@pytest.fixture
def validator() -> PolicyValidator:
    return PolicyValidator()


def _rules(*entries):
    return {"job": list(entries)}


class TestSelector:
    """by / notBy section checks."""

    def test_valid_document(self, validator, make_document) -> None:
        validator.validate(make_document())

    def test_missing_by_and_not_by(self, validator, make_document) -> None:
        with pytest.raises(PolicySyntaxError, match="'by:' or 'notBy:'"):
            validator.validate(make_document(by=None))

    def test_by_and_not_by_are_exclusive(self, validator, make_document) -> None:
        doc = make_document(
            not_by={"group": "guests"},
            for_=_rules({"deny": "read"}),
        )
        with pytest.raises(PolicySyntaxError, match="Only one of"):
            validator.validate(doc)

    def test_by_without_principals(self, validator, make_document) -> None:
        with pytest.raises(PolicySyntaxError, match="Section 'by:' is not valid"):
            validator.validate(make_document(by={}))

    def test_not_by_without_principals(self, validator, make_document) -> None:
        doc = make_document(by=None, not_by={}, for_=_rules({"deny": "read"}))
        with pytest.raises(PolicySyntaxError, match="Section 'notBy:' is not valid"):
            validator.validate(doc)

    def test_not_by_with_deny_is_valid(self, validator, make_document) -> None:
        doc = make_document(
            by=None,
            not_by={"group": "admin"},
            for_=_rules({"deny": ["delete"]}),
        )
        validator.validate(doc)

    def test_not_by_rejects_allow(self, validator, make_document) -> None:
        doc = make_document(
            by=None,
            not_by={"group": "admin"},
            for_=_rules({"allow": "read", "deny": "delete"}),
        )
        with pytest.raises(PolicySyntaxError, match="only use 'deny:'"):
            validator.validate(doc)


class TestForSection:
    """for: section and rule entry checks."""

    def test_missing_for(self, validator, make_document) -> None:
        with pytest.raises(PolicySyntaxError, match="Required 'for:' section"):
            validator.validate(make_document(for_=None))

    def test_empty_for(self, validator, make_document) -> None:
        doc = make_document(for_={})
        with pytest.raises(PolicySyntaxError, match="Section 'for:' should not be empty"):
            validator.validate(doc)

    def test_empty_type_rule_list(self, validator, make_document) -> None:
        doc = make_document(for_={"job": []})
        with pytest.raises(PolicySyntaxError, match=r"for: \{ job: \[\.\.\.\] \}' list"):
            validator.validate(doc)

    def test_rule_without_allow_or_deny(self, validator, make_document) -> None:
        doc = make_document(for_=_rules({"match": {"name": ".*"}}))
        with pytest.raises(PolicySyntaxError) as exc:
            validator.validate(doc)
        assert "index [1]" in str(exc.value)
        assert "One of 'allow:' or 'deny:' must be present" in str(exc.value)

    def test_allow_and_deny_both_present(self, validator, make_document) -> None:
        doc = make_document(for_=_rules({"allow": ["read"], "deny": ["delete"]}))
        validator.validate(doc)

    def test_index_is_one_based(self, validator, make_document) -> None:
        doc = make_document(for_=_rules({"allow": "read"}, {"equals": {"name": "x"}}))
        with pytest.raises(PolicySyntaxError, match=r"index \[2\]"):
            validator.validate(doc)

    def test_empty_grant_list(self, validator, make_document) -> None:
        doc = make_document(for_=_rules({"allow": []}))
        with pytest.raises(PolicySyntaxError, match="Section 'allow:' should not be empty"):
            validator.validate(doc)

    def test_grant_wrong_type(self, validator, make_document) -> None:
        doc = make_document(for_=_rules({"deny": {"read": True}}))
        with pytest.raises(PolicySyntaxError, match="expected a String or a sequence"):
            validator.validate(doc)

    def test_grant_list_with_non_string(self, validator, make_document) -> None:
        doc = make_document(for_=_rules({"allow": ["read", 3]}))
        with pytest.raises(PolicySyntaxError, match="should contain only Strings"):
            validator.validate(doc)

    def test_error_names_type(self, validator, make_document) -> None:
        doc = make_document(for_={"node": [{"allow": []}]})
        with pytest.raises(PolicySyntaxError, match=r"for: \{ node: \[\.\.\.\] \}"):
            validator.validate(doc)


class TestMatcherSections:
    """match / contains / equals / subset checks."""

    @pytest.mark.parametrize("section", ["match", "equals", "subset", "contains"])
    def test_empty_section(self, validator, make_document, section) -> None:
        doc = make_document(for_=_rules({"allow": "read", section: {}}))
        with pytest.raises(PolicySyntaxError, match=f"Section '{section}:' should not be empty"):
            validator.validate(doc)

    @pytest.mark.parametrize("section", ["match", "equals", "subset"])
    def test_section_with_grant_key(self, validator, make_document, section) -> None:
        doc = make_document(for_=_rules({"allow": "read", section: {"allow": "x"}}))
        with pytest.raises(PolicySyntaxError, match="should not contain 'allow:' or 'deny:'"):
            validator.validate(doc)

    def test_null_value(self, validator, make_document) -> None:
        doc = make_document(for_=_rules({"allow": "read", "equals": {"name": None}}))
        with pytest.raises(PolicySyntaxError, match="value for key: 'name' cannot be null"):
            validator.validate(doc)

    def test_contains_only_tags(self, validator, make_document) -> None:
        doc = make_document(for_=_rules({"allow": "read", "contains": {"name": "x"}}))
        with pytest.raises(PolicySyntaxError, match="can only be applied to: 'tags'"):
            validator.validate(doc)

    def test_contains_tags_is_valid(self, validator, make_document) -> None:
        doc = make_document(for_=_rules({"allow": "read", "contains": {"tags": ["prod"]}}))
        validator.validate(doc)


class TestDescription:

    def test_missing_description(self, validator, make_document) -> None:
        with pytest.raises(PolicySyntaxError, match="missing a description"):
            validator.validate(make_document(description=None))

    def test_check_returns_message(self, validator, make_document) -> None:
        assert validator.check(make_document()) is None
        assert "description" in validator.check(make_document(description=None))
