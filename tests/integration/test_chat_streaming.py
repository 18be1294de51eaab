"""End-to-end chat sessions over HTTP.

A SessionController drives the real FastAPI app through HttpThreadBackend
and ASGITransport, so events cross the SSE encoding in both directions. The
Assistants API itself is replaced by the in-memory backend.
"""

from collections.abc import Callable

import pytest
import pytest_check as check
from fastapi import FastAPI
from httpx import ASGITransport

from empleabot.errors import RemoteResourceError, RunFailedError, StreamProtocolError
from empleabot.models.events import (
    FileAnnotation,
    ImageFileDone,
    RequiredToolCall,
    RunCompleted,
    RunFailed,
    RunRequiresAction,
    TextCreated,
    TextDelta,
    ToolCallCreated,
    ToolCallDelta,
    ToolOutput,
)
from empleabot.parsing.pdf_parser import extract_pdf
from empleabot.session.controller import SessionController
from empleabot.session.reconstructor import RunState
from empleabot.session.transcript import Role
from empleabot.ui.api_client import HttpThreadBackend
from tests.fakes import FakeThreadBackend, broken_feed


@pytest.fixture
def http_backend(app: FastAPI) -> HttpThreadBackend:
    return HttpThreadBackend("http://test", transport=ASGITransport(app=app))


@pytest.fixture
def controller(http_backend: HttpThreadBackend) -> SessionController:
    return SessionController(http_backend, files_url="/api/files", idle_timeout=5.0)


class TestHttpThreadBackend:
    """Tests for the UI-side client of the thread endpoints."""

    async def test_create_thread(self, http_backend: HttpThreadBackend) -> None:
        assert await http_backend.create_thread() == "thread_1"

    async def test_events_survive_sse_round_trip(
        self, http_backend: HttpThreadBackend, backend: FakeThreadBackend
    ) -> None:
        script = [
            TextCreated(),
            TextDelta(annotations=[FileAnnotation(text="sandbox:/a.csv", file_id="file_a")]),
            RunRequiresAction(run_id="run_1", tool_calls=[RequiredToolCall(id="call_1")]),
        ]
        backend.feeds.append(list(script))

        feed = await http_backend.post_message("thread_1", "Hola")

        assert [event async for event in feed] == script

    async def test_error_status_raises_remote_error(
        self, http_backend: HttpThreadBackend
    ) -> None:
        """HTTP errors surface when the feed is read."""
        feed = await http_backend.post_message("thread_1", "Hola")

        with pytest.raises(RemoteResourceError, match="HTTP 502"):
            async for _ in feed:
                pass


class TestChatSession:
    """Full sessions from submit to rebuilt transcript."""

    async def test_text_reply(
        self, controller: SessionController, backend: FakeThreadBackend
    ) -> None:
        backend.feeds.append(
            [TextCreated(), TextDelta(value="¡Hola! "), TextDelta(value="¿En qué te ayudo?")]
            + [RunCompleted(run_id="run_1")]
        )

        await controller.submit("Hola")

        check.equal(controller.thread_id, "thread_1")
        check.equal([m.role for m in controller.transcript.snapshot()], [Role.USER, Role.ASSISTANT])
        check.equal(controller.transcript.last.text, "¡Hola! ¿En qué te ayudo?")
        check.equal(controller.reconstructor.state, RunState.COMPLETED)

    async def test_code_interpreter_run_with_chart(
        self, controller: SessionController, backend: FakeThreadBackend
    ) -> None:
        """Code, then a chart image, then text, each in the right message."""
        backend.feeds.append(
            [
                ToolCallCreated(kind="code_interpreter", tool_call_id="call_1"),
                ToolCallDelta(kind="code_interpreter", input="plt.bar(x, y)"),
                ImageFileDone(file_id="file_chart"),
                TextCreated(),
                TextDelta(value="Aquí tienes el gráfico."),
                RunCompleted(run_id="run_1"),
            ]
        )

        await controller.submit("Grafica mis habilidades")

        messages = controller.transcript.snapshot()
        check.equal([m.role for m in messages], [Role.USER, Role.CODE, Role.ASSISTANT])
        check.equal(messages[1].text, "plt.bar(x, y)\n![file_chart](/api/files/file_chart)\n")
        check.equal(messages[2].text, "Aquí tienes el gráfico.")

    async def test_function_call_round_trip(
        self, app: FastAPI, backend: FakeThreadBackend
    ) -> None:
        """Tool outputs travel back through the actions endpoint."""

        async def resolver(call: RequiredToolCall) -> str:
            return f"{call.name}:{call.arguments}"

        controller = SessionController(
            HttpThreadBackend("http://test", transport=ASGITransport(app=app)),
            resolver=resolver,
            idle_timeout=5.0,
        )
        backend.feeds.append(
            [
                RunRequiresAction(
                    run_id="run_1",
                    tool_calls=[
                        RequiredToolCall(id="call_1", name="jobs", arguments='{"city": "Lima"}')
                    ],
                )
            ]
        )
        backend.feeds.append([TextCreated(), TextDelta(value="3 ofertas"), RunCompleted()])

        await controller.submit("Busca empleos")

        check.equal(
            backend.submissions,
            [
                (
                    "thread_1",
                    "run_1",
                    [ToolOutput(tool_call_id="call_1", output='jobs:{"city": "Lima"}')],
                )
            ],
        )
        check.equal(controller.transcript.last.text, "3 ofertas")

    async def test_attachment_sent_with_query(
        self,
        controller: SessionController,
        backend: FakeThreadBackend,
        make_pdf: Callable[..., bytes],
    ) -> None:
        """An uploaded CV is folded into the next message only."""
        backend.feeds.append([TextCreated(), TextDelta(value="Ok"), RunCompleted()])
        backend.feeds.append([TextCreated(), TextDelta(value="Ok"), RunCompleted()])

        await controller.attach(make_pdf("Ingeniera de datos"), "cv.pdf")
        await controller.submit("¿Qué falta?")
        await controller.submit("Gracias")

        check.equal(
            backend.messages[0][1],
            "PDF Content from cv.pdf:\nIngeniera de datos\n\nUser Query: ¿Qué falta?",
        )
        check.equal(backend.messages[1][1], "Gracias")
        check.equal(controller.transcript.snapshot()[0].text, "¿Qué falta?")

    async def test_uploaded_text_matches_local_extraction(
        self, async_client, make_pdf: Callable[..., bytes]
    ) -> None:
        pdf = make_pdf("Experiencia: 5 años", "Idiomas: inglés")

        response = await async_client.post(
            "/upload/pdf", files={"file": ("cv.pdf", pdf, "application/pdf")}
        )

        assert response.json()["text"] == extract_pdf(pdf, "cv.pdf").text

    async def test_failed_run_reenables_input(
        self, controller: SessionController, backend: FakeThreadBackend
    ) -> None:
        backend.feeds.append(
            [TextCreated(), RunFailed(run_id="run_1", status="failed", message="rate_limit")]
        )

        with pytest.raises(RunFailedError, match="rate_limit"):
            await controller.submit("Hola")

        check.equal(controller.reconstructor.state, RunState.FAILED)
        check.is_true(controller.input_enabled)

    async def test_server_stream_failure_surfaces_as_protocol_error(
        self, controller: SessionController, backend: FakeThreadBackend
    ) -> None:
        """An error frame from the API ends the run on the client."""
        backend.feeds.append(
            broken_feed([TextCreated(), TextDelta(value="Hol")], StreamProtocolError("reset"))
        )

        with pytest.raises(StreamProtocolError, match="reset"):
            await controller.submit("Hola")

        check.equal(controller.transcript.last.text, "Hol")
        check.is_true(controller.input_enabled)
