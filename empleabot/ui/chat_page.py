"""NiceGUI chat interface driven by a SessionController."""

import asyncio
import logging
import os

from nicegui import events, ui

from empleabot.errors import EmpleaBotError, ExtractionError
from empleabot.session.controller import SessionController
from empleabot.session.transcript import Message, Role
from empleabot.ui.api_client import API_BASE_URL, HttpThreadBackend

logger = logging.getLogger(__name__)

FILES_URL = os.getenv("FILES_URL", "/api/files")
RUN_IDLE_TIMEOUT = float(os.getenv("RUN_IDLE_TIMEOUT", "120"))

# (button label, prompt sent)
SUGGESTIONS = [
    ("Mejorar mi CV", "¿Qué áreas de mi CV necesitan mejora?"),
    ("Destacar habilidades", "¿Qué habilidades debería destacar?"),
    ("Adaptar CV al sector tecnológico", "¿Como Adaptar mi CV para el sector tecnológico?"),
    ("Resaltar secciones importantes", "¿Faltan secciones importantes?"),
]

CUSTOM_CSS = """
<style>
    body { background: #f5f5f5; min-height: 100vh; }

    .app-container {
        background: white;
        border-radius: 12px;
        box-shadow: 0 2px 8px rgba(0, 0, 0, 0.1);
        overflow: hidden;
    }

    .header { background: #4a5d4b; }

    .message-user {
        background: #4a5d4b;
        color: white;
        border-radius: 18px 18px 4px 18px;
    }

    .message-assistant {
        background: #f3f4f6;
        color: #1f2937;
        border-radius: 18px 18px 18px 4px;
    }

    .input-box {
        background: #f9fafb;
        border: 1px solid #e5e7eb;
        border-radius: 12px;
    }
</style>
"""


def render_message(message: Message) -> None:
    if message.role is Role.USER:
        with ui.row().classes("w-full justify-end"):
            ui.label(message.text).classes("message-user px-4 py-3 max-w-[70%] whitespace-pre-wrap")
    elif message.role is Role.ASSISTANT:
        with ui.row().classes("w-full justify-start"):
            with ui.element("div").classes("message-assistant px-4 py-3 max-w-[80%]"):
                ui.markdown(message.text, extras=["fenced-code-blocks", "tables"])
    else:
        ui.code(message.text or " ", language="python").classes("w-full text-xs")


@ui.page("/")
async def chat_page() -> None:
    """Main chat page. One SessionController (and one thread) per page visit."""
    ui.add_head_html(CUSTOM_CSS)
    controller = SessionController(
        HttpThreadBackend(API_BASE_URL),
        files_url=FILES_URL,
        idle_timeout=RUN_IDLE_TIMEOUT,
    )

    input_field: ui.input
    upload: ui.upload

    async def send(text: str | None = None) -> None:
        message = (text if text is not None else input_field.value or "").strip()
        if not message or not controller.input_enabled:
            return
        input_field.value = ""
        try:
            await controller.submit(message)
        except EmpleaBotError as error:
            logger.error(f"Run failed: {error}")
            ui.notify(str(error), type="negative")

    async def handle_upload(e: events.UploadEventArguments) -> None:
        extraction = asyncio.create_task(
            controller.attach(await e.file.read(), e.file.name, e.file.content_type)
        )
        await asyncio.sleep(0)  # let the extraction mark the slot as processing
        attachment_view.refresh()
        try:
            attachment = await extraction
        except ExtractionError as error:
            ui.notify(str(error), type="negative")
        else:
            ui.notify(f"{attachment.name} ready ({attachment.pages} pages)")
        finally:
            upload.reset()
            attachment_view.refresh()

    def remove_attachment() -> None:
        controller.discard_attachment()
        attachment_view.refresh()

    @ui.refreshable
    def messages_view() -> None:
        messages = controller.transcript.snapshot()
        if not messages:
            with ui.column().classes("w-full items-center gap-3 py-8"):
                ui.label("empleabot").classes("text-2xl font-semibold text-gray-600")
                ui.label("Agrega tu CV y pregunta como:").classes("text-gray-400")
                with ui.grid(columns=2).classes("gap-2"):
                    for label, prompt in SUGGESTIONS:
                        ui.button(label, on_click=lambda p=prompt: send(p)).props("outline")
            return
        for message in messages:
            render_message(message)

    @ui.refreshable
    def attachment_view() -> None:
        if controller.attachments.processing:
            with ui.row().classes("items-center gap-2 px-4"):
                ui.spinner(size="sm")
                ui.label("Processing PDF...").classes("text-sm text-gray-500")
        elif (attachment := controller.attachments.pending) is not None:
            with ui.row().classes("items-center gap-2 px-4"):
                ui.icon("description").classes("text-gray-500")
                ui.label(attachment.name).classes("text-sm")
                ui.button(icon="close", on_click=remove_attachment).props("flat round dense")

    controller.transcript.subscribe(lambda _: messages_view.refresh())
    controller.reconstructor.subscribe(lambda _: attachment_view.refresh())

    # === UI Layout ===
    with (
        ui.element("div").classes("w-full min-h-screen p-4 md:p-8"),
        ui.column().classes("w-full max-w-3xl mx-auto app-container").style(
            "height: calc(100vh - 4rem)"
        ),
    ):
        with ui.row().classes("w-full header px-5 py-4 items-center"):
            ui.icon("work").classes("text-white text-3xl")
            ui.label("EmpleaBot").classes("text-lg font-semibold text-white")

        with (
            ui.scroll_area().classes("flex-grow w-full bg-gray-50"),
            ui.column().classes("w-full p-5 gap-4"),
        ):
            messages_view()

        attachment_view()

        with ui.row().classes("w-full p-4 gap-3 items-end bg-white border-t"):
            upload = (
                ui.upload(on_upload=handle_upload, auto_upload=True, max_files=1)
                .props('accept=".pdf" flat dense hide-upload-btn')
                .classes("w-40")
            )
            upload.bind_enabled_from(controller, "input_enabled")
            with ui.element("div").classes("flex-grow input-box px-3 py-2"):
                input_field = (
                    ui.input(placeholder="Type your message...")
                    .props("borderless dense")
                    .classes("w-full")
                    .on("keydown.enter", lambda: send())
                )
                input_field.bind_enabled_from(controller, "input_enabled")
            ui.button(icon="send", on_click=lambda: send()).props(
                "round unelevated"
            ).bind_enabled_from(controller, "input_enabled")

    await ui.context.client.connected()
    ui.context.client.on_disconnect(controller.cancel)
    try:
        await controller.start()
    except EmpleaBotError as error:
        logger.error(f"Could not create a thread: {error}")
        ui.notify(f"Could not start a conversation: {error}", type="negative")


def main() -> None:
    ui.run(title="EmpleaBot", port=8080, reload=False)


if __name__ == "__main__":
    main()
