"""
Gradio host shell for the FaceNomad enrollment wizard.

Builds the single page that hosts the wizard, owns the one wizard instance
and launches it in the browser.
Run with: python -m frontend.app_gradio
"""

import argparse
import functools
import logging
from typing import Iterator, Optional

import gradio as gr

from core.config import (
    get_app_config,
    get_camera_config,
    get_enrollment_service_config,
    get_wizard_config,
)
from frontend.api_client import create_client
from frontend.components.enrollment_wizard import (
    EnrollmentWizard,
    WizardConfig,
    WizardStage,
    WizardStateError,
    WizardValidationError,
)
from frontend.components.webcam_capture import CaptureConfig, WebcamCapture

logger = logging.getLogger(__name__)


# ============================================================
# View
# ============================================================

def render(wizard: EnrollmentWizard) -> tuple:
    """
    Map the wizard state onto component updates.

    Order matches the ``outputs`` list built in create_demo().
    """
    stage = wizard.stage
    has_snapshot = wizard.snapshot is not None
    error = wizard.error_message
    succeeded = stage == WizardStage.RESULT and bool(wizard.success_message)
    camera_missing = stage == WizardStage.CAPTURE and not wizard.has_camera

    if stage == WizardStage.RESULT:
        result_text = (
            f"## ✓ {wizard.success_message}" if succeeded
            else f"## ! Error\n\n{error or ''}"
        )
    else:
        result_text = ""

    return (
        gr.update(visible=stage == WizardStage.INTRO),
        gr.update(visible=stage == WizardStage.CAPTURE),
        gr.update(visible=stage == WizardStage.PROCESSING),
        gr.update(visible=stage == WizardStage.RESULT),
        gr.update(value=f"⚠️ {error}" if stage == WizardStage.CAPTURE and error else "",
                  visible=stage == WizardStage.CAPTURE and bool(error)),
        gr.update(visible=not has_snapshot and not camera_missing),
        gr.update(visible=has_snapshot),
        gr.update(value=result_text),
        gr.update(visible=succeeded),
        gr.update(visible=stage == WizardStage.RESULT and not succeeded),
        gr.update(value=wizard.preview_frame()),
        gr.update(visible=camera_missing and not has_snapshot),
    )


def _guarded(wizard: EnrollmentWizard):
    """Re-render instead of failing when a button fires from a stale stage."""
    def decorator(fn):
        @functools.wraps(fn)
        def wrapper(*args, **kwargs):
            try:
                fn(*args, **kwargs)
            except WizardStateError as e:
                logger.debug(f"Ignored action: {e}")
            return render(wizard)
        return wrapper
    return decorator


def submit_views(wizard: EnrollmentWizard) -> Iterator[tuple]:
    """Yield the processing view before the blocking upload, then the result view."""
    try:
        ticket = wizard.begin_submit()
    except (WizardValidationError, WizardStateError) as e:
        logger.info(f"Submit blocked: {e}")
        yield render(wizard)
        return

    yield render(wizard)
    wizard.resolve_submit(ticket)
    yield render(wizard)


def preview_view(wizard: EnrollmentWizard):
    """Timer output: the current preview image, or no change."""
    if wizard.stage != WizardStage.CAPTURE:
        return gr.update()
    frame = wizard.preview_frame()
    return gr.update() if frame is None else frame


def reload_view(wizard: EnrollmentWizard) -> tuple:
    """Page (re)load: start over from intro."""
    # One wizard serves the whole process; a second tab takes over the session.
    if wizard.stage != WizardStage.INTRO:
        logger.warning(f"Page loaded while stage was '{wizard.stage.value}'; resetting session")
    wizard.reset()
    return render(wizard)


# ============================================================
# Build Gradio Interface
# ============================================================

def create_demo(wizard: EnrollmentWizard, title: str = "FaceNomad") -> gr.Blocks:
    """Create the Gradio page hosting the wizard."""

    guarded = _guarded(wizard)

    @guarded
    def on_start():
        wizard.start()

    @guarded
    def on_capture():
        wizard.capture()

    @guarded
    def on_retake():
        wizard.retake()

    @guarded
    def on_finalize():
        wizard.finalize()

    @guarded
    def on_retry():
        wizard.retry()

    def on_submit():
        yield from submit_views(wizard)

    with gr.Blocks(title=title) as demo:
        gr.Markdown(f"# {title}")

        with gr.Column(visible=True) as intro_col:
            gr.Markdown("## Face recognition")
            gr.Markdown("This app will capture your face to enroll you securely.")
            start_btn = gr.Button("Start", variant="primary")

        with gr.Column(visible=False) as capture_col:
            preview = gr.Image(
                label="Camera",
                type="numpy",
                interactive=False,
            )
            capture_error = gr.Markdown("", visible=False)
            snapshot_btn = gr.Button("Take photo", variant="primary")
            camera_retry_btn = gr.Button("Retry camera", variant="secondary", visible=False)
            with gr.Row(visible=False) as review_row:
                retake_btn = gr.Button("Retake", variant="secondary")
                submit_btn = gr.Button("Send", variant="primary")

        with gr.Column(visible=False) as processing_col:
            gr.Markdown("## Processing...")

        with gr.Column(visible=False) as result_col:
            result_text = gr.Markdown("")
            finalize_btn = gr.Button("Finish", variant="primary", visible=False)
            retry_btn = gr.Button("Try again", variant="primary", visible=False)

        outputs = [
            intro_col, capture_col, processing_col, result_col,
            capture_error, snapshot_btn, review_row,
            result_text, finalize_btn, retry_btn,
            preview, camera_retry_btn,
        ]

        start_btn.click(fn=on_start, inputs=[], outputs=outputs)
        snapshot_btn.click(fn=on_capture, inputs=[], outputs=outputs)
        camera_retry_btn.click(fn=on_retake, inputs=[], outputs=outputs)
        retake_btn.click(fn=on_retake, inputs=[], outputs=outputs)
        submit_btn.click(fn=on_submit, inputs=[], outputs=outputs)
        finalize_btn.click(fn=on_finalize, inputs=[], outputs=outputs)
        retry_btn.click(fn=on_retry, inputs=[], outputs=outputs)

        timer = gr.Timer(value=wizard.config.preview_interval_sec)
        timer.tick(fn=lambda: preview_view(wizard), inputs=[], outputs=[preview],
                   show_progress="hidden")

        demo.load(fn=lambda: reload_view(wizard), inputs=[], outputs=outputs)
        # Any closing tab releases the shared camera; see reload_view.
        demo.unload(wizard.shutdown)

    return demo


def build_wizard(mode: Optional[str] = None) -> EnrollmentWizard:
    """Wire the wizard from config.yaml."""
    capture_config = CaptureConfig.from_dict(get_camera_config())
    client = create_client(get_enrollment_service_config(), mode=mode)

    return EnrollmentWizard(
        client=client,
        camera_factory=lambda: WebcamCapture(capture_config),
        config=WizardConfig.from_dict(get_wizard_config()),
    )


# ============================================================
# Entry Point
# ============================================================

def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="FaceNomad face enrollment")
    parser.add_argument("--dev", action="store_true",
                        help="Development mode: verbose logging, errors shown in the page")
    parser.add_argument("--mock", action="store_true",
                        help="Answer enrollments locally instead of calling the service")
    parser.add_argument("--port", type=int, default=None, help="Override app.server_port")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.dev else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    app_config = get_app_config()
    wizard = build_wizard(mode="mock" if args.mock else None)
    demo = create_demo(wizard, title=app_config.get("title", "FaceNomad"))

    try:
        demo.launch(
            server_name=app_config.get("server_name", "127.0.0.1"),
            server_port=args.port or app_config.get("server_port", 7860),
            inbrowser=app_config.get("inbrowser", True),
            debug=args.dev,
            show_error=args.dev,
        )
    finally:
        wizard.shutdown()

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
