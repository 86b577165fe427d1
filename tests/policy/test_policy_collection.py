"""Tests for PolicyCollection batch loading and the ValidationSet."""

import threading

import pytest

from aclengine.policy import Attribute, PolicyCollection, ValidationSet, YamlSource


class TestValidationSet:

    def test_empty_is_valid(self) -> None:
        validation = ValidationSet()
        assert validation.valid
        assert len(validation) == 0
        assert validation  # usable in boolean context even when empty

    def test_grouped_by_identity(self) -> None:
        validation = ValidationSet()
        validation.add_error("a[1]", "first")
        validation.add_error("b[1]", "other")
        validation.add_error("a[1]", "second")
        assert validation.errors == {"a[1]": ["first", "second"], "b[1]": ["other"]}
        assert len(validation) == 3
        assert not validation.valid

    def test_errors_is_a_copy(self) -> None:
        validation = ValidationSet()
        validation.add_error("a", "x")
        validation.errors["a"].append("y")
        assert validation.messages_for("a") == ["x"]

    def test_merge(self) -> None:
        one, two = ValidationSet(), ValidationSet()
        one.add_error("a", "x")
        two.add_error("a", "y")
        one.add_validation(two)
        assert one.messages_for("a") == ["x", "y"]

    def test_concurrent_appends(self) -> None:
        validation = ValidationSet()

        def _worker(n: int) -> None:
            for i in range(200):
                validation.add_error(f"src{n}", f"message {i}")

        threads = [threading.Thread(target=_worker, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(validation) == 8 * 200
        for n in range(8):
            assert validation.messages_for(f"src{n}") == [f"message {i}" for i in range(200)]


class TestPolicyCollection:

    def test_from_strings(self, admin_policy_yaml, application_policy_yaml) -> None:
        collection = PolicyCollection.from_strings(admin_policy_yaml, application_policy_yaml)
        assert collection.validation.valid
        assert collection.count == 2
        # admin: 1 group x 3 rule entries; application: 2 users x 1 entry
        assert len(collection.rule_set) == 5
        assert {r.environment.key for r in collection.rule_set} == {"project", "application"}

    def test_invalid_document_is_isolated(self, admin_policy_yaml) -> None:
        broken = admin_policy_yaml.replace("description: Admin access to the ops project\n", "")
        text = "---\n".join([admin_policy_yaml, broken, admin_policy_yaml])
        collection = PolicyCollection([YamlSource.from_string(text, "ops.aclpolicy")])
        assert collection.count == 2
        assert collection.validation.errors == {
            "ops.aclpolicy[2]": ["Policy is missing a description"]
        }
        # provenance differs between [1] and [3], so both copies are kept
        assert len(collection.rule_set) == 6

    def test_markup_error_keeps_following_documents(self, admin_policy_yaml) -> None:
        text = "---\n".join([admin_policy_yaml, "for: {job: [\n", admin_policy_yaml])
        collection = PolicyCollection.from_strings(text)
        assert collection.count == 2
        assert list(collection.validation.errors) == ["<string:1>[2]"]
        assert [p.source_identity for p in collection] == [
            "<string:1>[1]", "<string:1>[3]"
        ]

    def test_parse_and_syntax_errors_are_recorded(self, admin_policy_yaml) -> None:
        text = "---\n".join([admin_policy_yaml, "unknown: 1\n"])
        other = "description: x\ncontext: {project: ops}\nfor: {job: [{allow: read}]}\n"
        collection = PolicyCollection([
            YamlSource.from_string(text, "a.aclpolicy"),
            YamlSource.from_string(other, "b.aclpolicy"),
        ])
        assert collection.count == 1
        errors = collection.validation.errors
        assert set(errors) == {"a.aclpolicy[2]", "b.aclpolicy[1]"}
        assert errors["a.aclpolicy[2]"] == [
            "Error parsing the policy document: Unknown property: unknown"
        ]
        assert "'by:' or 'notBy:'" in errors["b.aclpolicy[1]"][0]

    def test_forced_context(self) -> None:
        text = "description: forced\nfor: {job: [{allow: read}]}\nby: {group: dev}\n"
        collection = PolicyCollection.from_strings(
            text, forced_context=[Attribute.project("dev")]
        )
        assert collection.validation.valid
        rule = next(iter(collection.rule_set))
        assert rule.environment.value == "dev"

    def test_forced_context_rejects_declared_context(self, admin_policy_yaml) -> None:
        collection = PolicyCollection.from_strings(
            admin_policy_yaml, forced_context=[Attribute.project("dev")]
        )
        assert collection.count == 0
        [messages] = collection.validation.errors.values()
        assert "already set to" in messages[0]

    def test_from_directory(self, tmp_path, admin_policy_yaml, application_policy_yaml) -> None:
        (tmp_path / "admin.aclpolicy").write_text(admin_policy_yaml, encoding="utf-8")
        (tmp_path / "app.aclpolicy").write_text(application_policy_yaml, encoding="utf-8")
        (tmp_path / "notes.txt").write_text("ignored", encoding="utf-8")
        collection = PolicyCollection.from_directory(tmp_path, max_workers=2)
        assert collection.count == 2
        assert [p.source_identity for p in collection] == [
            "admin.aclpolicy[1]", "app.aclpolicy[1]"
        ]
        assert collection.validation.valid

    def test_from_missing_directory(self, tmp_path) -> None:
        with pytest.raises(FileNotFoundError):
            PolicyCollection.from_directory(tmp_path / "nope")

    def test_unreadable_source_is_recorded(self, tmp_path, admin_policy_yaml) -> None:
        collection = PolicyCollection([
            YamlSource.from_file(tmp_path / "missing.aclpolicy"),
            YamlSource.from_string(admin_policy_yaml, "ok.aclpolicy"),
        ])
        assert collection.count == 1
        assert "missing.aclpolicy" in collection.validation.errors

    def test_shared_validation_across_loads(self) -> None:
        validation = ValidationSet()
        PolicyCollection([YamlSource.from_string("bogus: 1\n", "a")], validation=validation)
        PolicyCollection([YamlSource.from_string("bogus: 2\n", "b")], validation=validation)
        assert set(validation.errors) == {"a[1]", "b[1]"}
