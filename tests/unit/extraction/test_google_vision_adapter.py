import pytest
from google.api_core import exceptions as google_exceptions
from google.cloud import vision

from medextract.domain.contracts import EngineOptions
from medextract.extraction.domain.exceptions import OCRProviderError, OCRResponseError, OCRTimeoutError
from medextract.extraction.infrastructure.adapters.google_vision_adapter import GoogleVisionOCREngine


class FakeVisionClient:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.kwargs = None

    def document_text_detection(self, **kwargs):
        self.kwargs = kwargs
        if self.error:
            raise self.error
        return self.response


def annotated(text, confidences):
    return vision.AnnotateImageResponse(
        full_text_annotation=vision.TextAnnotation(
            text=text, pages=[vision.Page(confidence=c) for c in confidences]
        )
    )


def recognize(client):
    engine = GoogleVisionOCREngine(client=client, language_hints=["en"])
    return engine.recognize(b"png", "eng", EngineOptions(), timeout=7.5)


def test_text_and_confidence():
    client = FakeVisionClient(annotated("Glucose 95 mg/dL", [0.8, 1.0]))

    output = recognize(client)

    assert output.text == "Glucose 95 mg/dL"
    assert output.confidence == pytest.approx(90.0)
    assert client.kwargs["timeout"] == 7.5
    assert list(client.kwargs["image_context"].language_hints) == ["en"]


def test_empty_page():
    output = recognize(FakeVisionClient(vision.AnnotateImageResponse()))
    assert output.text == ""
    assert output.confidence == 0.0


def test_api_error_in_response():
    response = vision.AnnotateImageResponse(error={"message": "Bad image data"})
    with pytest.raises(OCRResponseError, match="Bad image data"):
        recognize(FakeVisionClient(response))


@pytest.mark.parametrize("error, expected", [
    (google_exceptions.DeadlineExceeded("slow"), OCRTimeoutError),
    (google_exceptions.PermissionDenied("billing disabled"), OCRProviderError),
    (google_exceptions.InternalServerError("oops"), OCRResponseError),
])
def test_error_mapping(error, expected):
    with pytest.raises(expected):
        recognize(FakeVisionClient(error=error))


def test_missing_credentials(tmp_path):
    with pytest.raises(OCRProviderError):
        GoogleVisionOCREngine(credentials_path=str(tmp_path / "missing.json"))
