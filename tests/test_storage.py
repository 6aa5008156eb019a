import base64

from intakeapi import storage
from intakeapi.config import config
from intakeapi.storage import decode_data_uri, is_data_uri, save_resume

PDF_BYTES = b"%PDF-1.4 resume"
DATA_URI = "data:application/pdf;base64," + base64.b64encode(PDF_BYTES).decode()


def test_is_data_uri():
    assert is_data_uri(DATA_URI)
    assert not is_data_uri("https://example.com/cv.pdf")
    assert not is_data_uri(None)
    assert not is_data_uri(["data:"])


def test_decode_data_uri():
    assert decode_data_uri(DATA_URI) == ("application/pdf", PDF_BYTES)


def test_save_resume_returns_public_url(minio_client):
    result = save_resume(DATA_URI, "Ada Lovelace CV.pdf", minio_client=minio_client)

    assert result.ok
    assert result.url.startswith(f"http://{config.MINIO_ENDPOINT}/{config.MINIO_BUCKET}/")
    assert result.object_name.endswith("_Ada_Lovelace_CV.pdf")
    assert result.size == len(PDF_BYTES)
    assert minio_client.objects[(config.MINIO_BUCKET, result.object_name)] == (PDF_BYTES, "application/pdf")


def test_bucket_is_created_once_and_link_readable(minio_client):
    save_resume(DATA_URI, "a.pdf", minio_client=minio_client)
    save_resume(DATA_URI, "b.pdf", minio_client=minio_client)

    assert minio_client.buckets == {config.MINIO_BUCKET}
    statement = minio_client.policies[config.MINIO_BUCKET]["Statement"][0]
    assert statement["Action"] == ["s3:GetObject"]
    assert statement["Principal"] == {"AWS": ["*"]}
    assert len(minio_client.objects) == 2


def test_save_resume_defaults_filename(minio_client):
    result = save_resume(DATA_URI, None, minio_client=minio_client)

    assert result.object_name.endswith("_resume.pdf")


def test_storage_failure_becomes_error_string(minio_client):
    minio_client.fail = True

    result = save_resume(DATA_URI, "cv.pdf", minio_client=minio_client)

    assert not result.ok
    assert result.error == "Error saving resume: storage unavailable"


def test_malformed_data_uri_becomes_error_string(minio_client):
    result = save_resume("data:application/pdf;base64", "cv.pdf", minio_client=minio_client)

    assert not result.ok
    assert result.error.startswith("Error saving resume: ")
    assert minio_client.objects == {}


def test_client_setup_failure_becomes_error_string(monkeypatch):
    def broken_client():
        raise ValueError("Invalid endpoint")

    monkeypatch.setattr(storage, "get_minio_client", broken_client)

    result = save_resume(DATA_URI, "cv.pdf")

    assert not result.ok
    assert result.error == "Error saving resume: Invalid endpoint"
