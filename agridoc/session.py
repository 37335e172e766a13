"""UI-facing commands over the diagnosis pipeline.

A ``DiagnosisSession`` holds the form state (selected image, note, last
view). UI layers call ``on_file_selected``, ``on_generate`` and ``on_clear``
and render whatever ``RenderedView`` comes back; no DOM or widget objects
reach this module.
"""

from loguru import logger

from agridoc.clients.base import BaseModelClient
from agridoc.inference import MISSING_IMAGE_MESSAGE, run_pipeline, validation_failure
from agridoc.mapper.base import BaseMapper
from agridoc.results.outcome import Failure, FailureReason
from agridoc.results.presenter import RenderedView, Tone, present
from agridoc.utils.data_types import SourceImage
from agridoc.utils.errors import ValidationError
from agridoc.utils.images import ingest

BUSY_MESSAGE = "An analysis is already running. Please wait for it to finish."


class DiagnosisSession:
    def __init__(self, client: BaseModelClient, mapper: BaseMapper | None = None):
        self.client = client
        self.mapper = mapper
        self.image: SourceImage | None = None
        self.note: str = ""
        self.view: RenderedView | None = None
        self._in_flight = False
        # Bumped whenever the form is reset so late results are dropped
        self._form_version = 0

    @property
    def is_busy(self) -> bool:
        return self._in_flight

    def on_file_selected(self, data: bytes, mime_type: str, name: str = "") -> RenderedView | None:
        """Validate and keep a newly selected file. Returns an error view if rejected."""
        try:
            image = ingest(data, mime_type, name=name)
        except ValidationError as e:
            self.view = present(validation_failure(e))
            return self.view
        self.image = image
        self.view = None
        self._form_version += 1
        return None

    async def on_generate(self, note: str | None = None) -> RenderedView:
        """Run the pipeline for the current image.

        Re-entrant calls while a run is in flight do not cancel or queue it;
        they return a notice and leave the current view alone.
        """
        if self._in_flight:
            logger.warning("Generate requested while an analysis is in flight; ignoring")
            return RenderedView(tone=Tone.NOTICE, message=BUSY_MESSAGE)
        if note is not None:
            self.note = note
        if self.image is None:
            self.view = present(Failure(FailureReason.MISSING_IMAGE, MISSING_IMAGE_MESSAGE))
            return self.view

        version = self._form_version
        self._in_flight = True
        self.view = None
        try:
            outcome = await run_pipeline(self.image, self.note, self.client, self.mapper)
        finally:
            self._in_flight = False

        view = present(outcome)
        if version == self._form_version:
            self.view = view
        else:
            logger.info("Form changed while the analysis was running; result not kept")
        return view

    def on_clear(self) -> None:
        self.image = None
        self.note = ""
        self.view = None
        self._form_version += 1
