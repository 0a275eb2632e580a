from unittest.mock import patch

import pytest

from conftest import FakeClient, ScriptedUrlopen, accepted, status_body
from docinsight.client import DocumentIntelligenceClient
from docinsight.config import Settings
from docinsight.controller import PageController
from docinsight.errors import (
    AnalysisInProgress,
    AnalysisTimedOut,
    FileTooLarge,
    InvalidFileType,
    MissingConfiguration,
    MissingOperationLocation,
    NoFileSelected,
)


@pytest.fixture
def controller(configured_settings):
    return PageController(configured_settings, client=FakeClient({"content": "text"}))


def test_select_then_analyze_renders(controller):
    selected = controller.select_file("a.pdf", 4, "application/pdf", b"%PDF")
    assert controller.snapshot().status == "file_selected"
    assert controller.snapshot().file == selected

    rendered = controller.analyze()

    assert rendered.content == "text"
    state = controller.snapshot()
    assert state.status == "rendered"
    assert state.result == rendered
    assert state.error is None
    assert state.attempts == 1


def test_rejected_selection_clears_previous_file(controller):
    controller.select_file("a.pdf", 4, "application/pdf", b"%PDF")
    with pytest.raises(InvalidFileType):
        controller.select_file("a.txt", 4, "text/plain", b"text")

    state = controller.snapshot()
    assert state.status == "idle"
    assert state.file is None
    assert state.error == "Please select a PDF, PNG, JPG, or JPEG file."


def test_oversized_selection_uses_configured_limit():
    ctrl = PageController(Settings(azure_endpoint="https://x", azure_api_key="k", max_upload_bytes=8))
    with pytest.raises(FileTooLarge):
        ctrl.select_file("big.png", 9, "image/png", b"x" * 9)


def test_new_selection_clears_error_and_result(controller):
    controller.select_file("a.pdf", 4, "application/pdf", b"%PDF")
    controller.analyze()
    with pytest.raises(InvalidFileType):
        controller.select_file("a.gif", 4, "image/gif")
    assert controller.snapshot().result is None

    controller.select_file("b.png", 4, "image/png", b"\x89PNG")
    state = controller.snapshot()
    assert state.error is None
    assert state.result is None
    assert state.status == "file_selected"


def test_analyze_without_selection(controller):
    with pytest.raises(NoFileSelected):
        controller.analyze()
    assert controller.snapshot().error == "Please select a file first."


def test_missing_configuration_fails_before_any_network_call():
    ctrl = PageController(Settings(azure_endpoint="YOUR_DOCUMENT_INTELLIGENCE_ENDPOINT", azure_api_key=""))
    ctrl.select_file("a.pdf", 4, "application/pdf", b"%PDF")
    fake = ScriptedUrlopen()
    with patch("docinsight.client.urlopen", fake):
        with pytest.raises(MissingConfiguration):
            ctrl.analyze()

    assert fake.requests == []
    state = ctrl.snapshot()
    assert state.status == "error"
    assert "configure your Azure credentials" in state.error


def test_analysis_error_is_published_without_result(configured_settings):
    ctrl = PageController(configured_settings, client=FakeClient(error=AnalysisTimedOut(30)))
    ctrl.select_file("a.pdf", 4, "application/pdf", b"%PDF")
    with pytest.raises(AnalysisTimedOut):
        ctrl.analyze()

    state = ctrl.snapshot()
    assert state.status == "error"
    assert state.error == "Failed to analyze document: Analysis timed out"
    assert state.result is None


def test_second_analysis_is_refused_while_one_is_running(configured_settings):
    refused = []
    fake = FakeClient({"content": "done"})
    ctrl = PageController(configured_settings, client=fake)

    def try_again():
        assert ctrl.snapshot().busy
        with pytest.raises(AnalysisInProgress):
            ctrl.analyze()
        refused.append(True)

    fake.during = try_again
    ctrl.select_file("a.pdf", 4, "application/pdf", b"%PDF")
    ctrl.analyze()

    assert refused == [True]
    assert len(fake.calls) == 1
    assert ctrl.snapshot().status == "rendered"


def test_abandoned_job_never_reaches_the_page(configured_settings):
    fake = FakeClient({"content": "stale"})
    ctrl = PageController(configured_settings, client=fake)
    fake.during = lambda: ctrl.select_file("new.png", 4, "image/png", b"\x89PNG")

    ctrl.select_file("old.pdf", 4, "application/pdf", b"%PDF")
    ctrl.analyze()

    state = ctrl.snapshot()
    assert state.status == "file_selected"
    assert state.file.name == "new.png"
    assert state.result is None


def test_full_pipeline_with_real_client(configured_settings, sleeps):
    client = DocumentIntelligenceClient.from_settings(configured_settings, sleep=sleeps.append)
    ctrl = PageController(configured_settings, client=client)
    ctrl.select_file("a.pdf", 4, "application/pdf", b"%PDF")
    payload = {"keyValuePairs": [{"key": {"content": "Name"}, "value": {}}], "content": "Name:"}
    fake = ScriptedUrlopen(accepted(), status_body("running"), status_body("succeeded", analyzeResult=payload))
    with patch("docinsight.client.urlopen", fake):
        rendered = ctrl.analyze()

    assert [(kv.key, kv.value) for kv in rendered.key_value_pairs] == [("Name", "N/A")]
    assert rendered.content == "Name:"
    assert ctrl.snapshot().attempts == 2
    assert fake.requests[0].data == b"%PDF"


def test_scheme_less_endpoint_fails_fast_and_leaves_page_usable():
    ctrl = PageController(Settings(azure_endpoint="myres.cognitiveservices.azure.com", azure_api_key="k"))
    ctrl.select_file("a.pdf", 4, "application/pdf", b"%PDF")
    fake = ScriptedUrlopen()
    with patch("docinsight.client.urlopen", fake):
        with pytest.raises(MissingConfiguration):
            ctrl.analyze()
        with pytest.raises(MissingConfiguration):
            ctrl.analyze()

    assert fake.requests == []
    state = ctrl.snapshot()
    assert state.status == "error"
    assert not state.busy


def test_relative_operation_location_ends_in_error_state(configured_settings, sleeps):
    client = DocumentIntelligenceClient.from_settings(configured_settings, sleep=sleeps.append)
    ctrl = PageController(configured_settings, client=client)
    ctrl.select_file("a.pdf", 4, "application/pdf", b"%PDF")
    fake = ScriptedUrlopen(accepted(location="/analyzeResults/abc"), accepted(location="/analyzeResults/abc"))
    with patch("docinsight.client.urlopen", fake):
        with pytest.raises(MissingOperationLocation):
            ctrl.analyze()
        state = ctrl.snapshot()
        assert state.status == "error"
        assert not state.busy
        assert state.error == "Failed to analyze document: No operation location returned from API"

        # Retrying is allowed rather than refused as already running.
        with pytest.raises(MissingOperationLocation):
            ctrl.analyze()


def test_unexpected_failure_never_leaves_page_busy(configured_settings):
    ctrl = PageController(configured_settings, client=FakeClient(error=RuntimeError("boom")))
    ctrl.select_file("a.pdf", 4, "application/pdf", b"%PDF")
    with pytest.raises(RuntimeError):
        ctrl.analyze()

    state = ctrl.snapshot()
    assert state.status == "error"
    assert not state.busy
    assert state.error == "Failed to analyze document: unexpected error"
    assert state.result is None
