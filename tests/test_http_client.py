"""Tests for the shared HTTP helpers."""

from unittest.mock import MagicMock, patch

import requests

from common.http_client import download_file, robust_get


def _response(status, text="", chunks=()):
    res = MagicMock()
    res.status_code = status
    res.text = text
    res.headers = {"Content-Type": "text/xml"}
    res.iter_content.return_value = list(chunks)
    res.__enter__.return_value = res
    res.__exit__.return_value = False
    return res


@patch("common.http_client.time.sleep")
@patch("common.http_client.requests.get")
def test_robust_get_success(mock_get, _sleep):
    mock_get.return_value = _response(200, "<metadata/>")
    assert robust_get("https://repo.example.org/x") == (200, {"Content-Type": "text/xml"}, "<metadata/>")


@patch("common.http_client.time.sleep")
@patch("common.http_client.requests.get")
def test_robust_get_retries_server_errors(mock_get, _sleep):
    mock_get.side_effect = [_response(503), _response(200, "ok")]
    status, _, text = robust_get("https://repo.example.org/x")
    assert (status, text) == (200, "ok")
    assert mock_get.call_count == 2


@patch("common.http_client.time.sleep")
@patch("common.http_client.requests.get")
def test_robust_get_does_not_retry_404(mock_get, _sleep):
    mock_get.return_value = _response(404)
    assert robust_get("https://repo.example.org/x")[0] == 404
    assert mock_get.call_count == 1


@patch("common.http_client.time.sleep")
@patch("common.http_client.requests.get")
def test_robust_get_transport_failure(mock_get, _sleep):
    mock_get.side_effect = requests.ConnectionError("refused")
    assert robust_get("https://repo.example.org/x") == (0, {}, "")


@patch("common.http_client.requests.get")
def test_download_file_writes_chunks(mock_get, tmp_path):
    mock_get.return_value = _response(200, chunks=[b"PK", b"", b"\x03\x04"])
    dest = tmp_path / "a.jar"
    assert download_file("https://repo.example.org/a.jar", str(dest)) == 200
    assert dest.read_bytes() == b"PK\x03\x04"


@patch("common.http_client.requests.get")
def test_download_file_not_found_leaves_nothing(mock_get, tmp_path):
    mock_get.return_value = _response(404)
    dest = tmp_path / "a.jar"
    assert download_file("https://repo.example.org/a.jar", str(dest)) == 404
    assert not dest.exists()


@patch("common.http_client.requests.get")
def test_download_file_timeout(mock_get, tmp_path):
    mock_get.side_effect = requests.Timeout()
    dest = tmp_path / "a.jar"
    assert download_file("https://repo.example.org/a.jar", str(dest)) == 0
    assert not dest.exists()
