import pytest

from tlsfileserve.cli import main, make_ssl_context


@pytest.mark.parametrize(
    "argv",
    [[], ["127.0.0.1"], ["127.0.0.1", "8443", "."], ["127.0.0.1", "8443", ".", "2", "x"]],
)
def test_wrong_argument_count_prints_usage(argv, capsys):
    assert main(argv) == 1
    err = capsys.readouterr().err
    assert "Usage:" in err
    assert "<address> <port> <doc_root> <threads>" in err


def test_invalid_address_reports_error(capsys):
    assert main(["not-an-address", "8443", ".", "1"]) == 1
    assert capsys.readouterr().err.startswith("Error: ")


def test_missing_certificate_reports_error(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    assert main(["127.0.0.1", "0", str(tmp_path), "1"]) == 1
    captured = capsys.readouterr()
    assert captured.err.startswith("Error: ")
    assert "HTTPS server started" not in captured.out


def test_make_ssl_context_missing_files(tmp_path):
    with pytest.raises(OSError):
        make_ssl_context(str(tmp_path / "server.crt"), str(tmp_path / "server.key"))


def test_make_ssl_context_rejects_non_pem(tmp_path):
    cert = tmp_path / "server.crt"
    key = tmp_path / "server.key"
    cert.write_text("not a certificate")
    key.write_text("not a key")
    with pytest.raises(OSError):
        make_ssl_context(str(cert), str(key))