import builtins
import os

import pytest

from hostaudit.document import Document
from hostaudit.errors import ConfigurationError, ExecutionError, NoValidSourceError
from hostaudit.objects import TestObject
from hostaudit.result import EvaluationCriteria
from hostaudit.sources.filecontent import FileContentSource
from hostaudit.sources.filename import FileNameSource
from hostaudit.sources.package import PackageSource
from hostaudit.sources.raw import RawIdentifier, RawSource


class RecordingSource(RawSource):
    """Raw source that records lifecycle calls and can act as a chain member."""

    def __init__(self, chain=False, fail=False):
        super().__init__([RawIdentifier("recorded", "value")])
        self.chain = chain
        self.fail = fail
        self.prepare_calls = 0
        self.expanded = None

    def is_chain(self):
        return self.chain

    def expand_variables(self, variables):
        self.expanded = dict(variables)

    def prepare(self):
        self.prepare_calls += 1
        if self.fail:
            raise ExecutionError("boom")


def make_document(*objects, variables=None):
    return Document(objects=objects, variables=variables)


def test_resolution_order_prefers_package():
    obj = TestObject(
        "multi",
        package=PackageSource("openssh-server"),
        filecontent=FileContentSource(path="/etc", file="x", expression="y"),
        filename=FileNameSource(path="/etc", file="x"),
        raw=RawSource([RawIdentifier("a", "b")]),
    )

    assert obj.get_source_interface() is obj.package
    obj.package = PackageSource()
    assert obj.get_source_interface() is obj.filecontent
    obj.filecontent = FileContentSource()
    assert obj.get_source_interface() is obj.filename
    obj.filename = FileNameSource()
    assert obj.get_source_interface() is obj.raw
    obj.raw = RawSource()
    assert obj.get_source_interface() is None


@pytest.mark.parametrize(
    "kwargs",
    [
        {},
        {"package": PackageSource("sudo"), "raw": RawSource([RawIdentifier("a")])},
        {
            "filecontent": FileContentSource(path="/etc", file="x", expression="y"),
            "filename": FileNameSource(path="/etc", file="x"),
        },
    ],
)
def test_validate_requires_exactly_one_source(kwargs):
    obj = TestObject("broken", **kwargs)

    with pytest.raises(NoValidSourceError, match="broken: no valid source interface"):
        obj.validate(make_document(obj))


def test_validate_requires_identifier():
    obj = TestObject("", raw=RawSource([RawIdentifier("a")]))

    with pytest.raises(ConfigurationError, match="no identifier"):
        obj.validate(make_document(obj))


def test_validate_wraps_source_error_with_identifier():
    obj = TestObject("sshd", filecontent=FileContentSource(path="/etc", file="sshd_config"))

    with pytest.raises(ConfigurationError, match="^sshd: filecontent expression must be set$"):
        obj.validate(make_document(obj))


def test_invalid_expression_fails_before_filesystem_access(monkeypatch):
    def forbidden(*args, **kwargs):
        raise AssertionError("filesystem accessed during validation")

    monkeypatch.setattr(os, "scandir", forbidden)
    monkeypatch.setattr(builtins, "open", forbidden)
    obj = TestObject("bad", filecontent=FileContentSource(path="/etc", file="passwd", expression="(root"))

    with pytest.raises(ConfigurationError, match="bad: filecontent expression"):
        obj.validate(make_document(obj))


def test_mark_chain_copies_source_flag():
    obj = TestObject("member", raw=RecordingSource(chain=True))

    obj.mark_chain()

    assert obj.is_chain is True


def test_chain_member_is_never_prepared():
    source = RecordingSource(chain=True)
    obj = TestObject("member", raw=source)
    obj.mark_chain()

    obj.prepare(make_document(obj))

    assert source.prepare_calls == 0
    assert obj.prepared is False


def test_chain_member_filesystem_untouched(tmp_path, monkeypatch):
    obj = TestObject("member", filecontent=FileContentSource(path=str(tmp_path), file="x", expression="y"))
    obj.is_chain = True

    def forbidden(*args, **kwargs):
        raise AssertionError("filesystem accessed for chain member")

    monkeypatch.setattr(os, "scandir", forbidden)
    obj.prepare(make_document(obj))

    assert obj.filecontent.matches == []


def test_prepare_is_idempotent(etc_tree, monkeypatch):
    obj = TestObject(
        "root-login",
        filecontent=FileContentSource(path=str(etc_tree), file="sshd_config", expression=r"^PermitRootLogin (\S+)"),
    )
    document = make_document(obj)
    obj.prepare(document)
    first = obj.get_criteria()

    def forbidden(*args, **kwargs):
        raise AssertionError("prepare ran twice")

    monkeypatch.setattr(os, "scandir", forbidden)
    obj.prepare(document)

    assert obj.get_criteria() == first
    assert [c.test_value for c in first] == ["no", "yes"]


def test_prepare_expands_document_variables():
    source = RecordingSource()
    obj = TestObject("vars", raw=source)

    obj.prepare(make_document(obj, variables={"root": "/etc"}))

    assert source.expanded == {"root": "/etc"}
    assert source.prepare_calls == 1


def test_failed_prepare_is_cached_and_not_retried():
    source = RecordingSource(fail=True)
    obj = TestObject("flaky", raw=source)
    document = make_document(obj)

    with pytest.raises(ExecutionError, match="^flaky: boom$"):
        obj.prepare(document)
    assert obj.prepared is True
    assert str(obj.error) == "flaky: boom"

    assert obj.prepare(document) is None
    assert source.prepare_calls == 1
    assert str(obj.error) == "flaky: boom"


def test_prepare_without_source_caches_error():
    obj = TestObject("empty")

    with pytest.raises(ExecutionError, match="no valid interface"):
        obj.prepare(make_document(obj))
    assert obj.error is not None
    obj.prepare(make_document(obj))


def test_fire_chains_merges_into_source():
    class ChainingSource(RecordingSource):
        def fire_chains(self, document):
            return [EvaluationCriteria("other", "42")]

    obj = TestObject("parent", raw=ChainingSource())

    obj.fire_chains(make_document(obj))

    assert EvaluationCriteria("other", "42") in obj.get_criteria()


def test_from_dict_builds_filecontent_object():
    obj = TestObject.from_dict(
        {"object": "sshd", "filecontent": {"path": "/etc", "file": "sshd_config", "expression": "^Port (\\d+)"}}
    )

    assert obj.identifier == "sshd"
    assert obj.get_source_interface() is obj.filecontent


def test_value_error_from_source_is_cached():
    class BadValueSource(RecordingSource):
        def prepare(self):
            self.prepare_calls += 1
            raise ValueError("embedded null byte")

    source = BadValueSource()
    obj = TestObject("bad-value", raw=source)

    with pytest.raises(ExecutionError, match="^bad-value: embedded null byte$"):
        obj.prepare(make_document(obj))
    assert str(obj.error) == "bad-value: embedded null byte"
    assert obj.prepare(make_document(obj)) is None
    assert source.prepare_calls == 1
