"""FastAPI + Tailwind interface for the citation formatter.

Run with:
    uvicorn citation_formatter.web:app --reload
"""
from __future__ import annotations

from contextlib import asynccontextmanager
from html import escape
from secrets import token_hex
from typing import AsyncIterator, Dict

from fastapi import FastAPI, Form, HTTPException
from fastapi.responses import HTMLResponse, Response

from .client import CitationApiClient
from .config import Settings
from .coordinator import ResolutionCoordinator
from .errors import EmptyInput, ExportFailure, InvalidSelection, LookupFailure
from .styles import EXPORT_FORMATS, CitationStyle

settings = Settings.from_env()
sessions: Dict[str, ResolutionCoordinator] = {}


def _close_session(coordinator: ResolutionCoordinator) -> None:
    """Drop the session state and release the HTTP client behind it."""

    coordinator.clear()
    closed = set()
    for collaborator in (coordinator.lookup, coordinator.exporter, coordinator.notifier):
        close = getattr(collaborator, "close", None)
        if close is None or id(collaborator) in closed:
            continue
        closed.add(id(collaborator))
        close()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    yield
    while sessions:
        _, coordinator = sessions.popitem()
        _close_session(coordinator)


app = FastAPI(
    title="Citation Formatter",
    description="Format and disambiguate references",
    lifespan=lifespan,
)


def _build_coordinator(style: str) -> ResolutionCoordinator:
    client = CitationApiClient.from_settings(settings)
    return ResolutionCoordinator(lookup=client, exporter=client, notifier=client, style=style)


def _session(token: str) -> ResolutionCoordinator:
    coordinator = sessions.get(token)
    if coordinator is None:
        raise HTTPException(status_code=404, detail="Session not found or expired")
    return coordinator


def _layout(content: str) -> str:
    """Wrap provided content in a Tailwind-powered HTML page."""

    return f"""
    <!doctype html>
    <html lang=\"en\" class=\"h-full bg-gray-50\">
    <head>
        <meta charset=\"utf-8\" />
        <title>Citation Formatter</title>
        <link href=\"https://cdn.jsdelivr.net/npm/tailwindcss@3.4.4/dist/tailwind.min.css\" rel=\"stylesheet\" />
    </head>
    <body class=\"min-h-full py-10\">
        <div class=\"max-w-4xl mx-auto px-4\">
            <div class=\"bg-white shadow rounded-lg p-6\">
                <h1 class=\"text-3xl font-semibold text-gray-900\">Citation Formatter</h1>
                <p class=\"text-gray-600 mt-2\">Paste your references below, one per line, and get them formatted in your preferred citation style. Download in BibTeX or EndNote formats.</p>
                {content}
            </div>
        </div>
    </body>
    </html>
    """


def _style_options(selected: str) -> str:
    return "".join(
        f"<option value=\"{style.value}\" {'selected' if style.value == selected else ''}>{style.name}</option>"
        for style in CitationStyle
    )


def _input_form(style: str, text: str = "", token: str = "") -> str:
    return f"""
    <form action=\"/format\" method=\"post\" class=\"bg-gray-50 border border-gray-200 rounded-lg p-4 mt-6\">
        <h2 class=\"text-xl font-semibold text-gray-800\">References Input</h2>
        <input type=\"hidden\" name=\"token\" value=\"{escape(token)}\" />
        <label class=\"block text-sm font-medium text-gray-700 mb-2\" for=\"style\">Citation Style</label>
        <select name=\"style\" class=\"border border-gray-300 rounded-md p-2 text-sm\">{_style_options(style)}</select>
        <textarea name=\"text\" placeholder=\"Enter references here, one per line. You can use DOIs or paper titles...\" class=\"w-full h-44 border border-gray-300 rounded-md p-3 text-sm mt-3\">{escape(text)}</textarea>
        <button type=\"submit\" class=\"mt-4 inline-flex items-center px-4 py-2 bg-indigo-600 text-white rounded-md shadow hover:bg-indigo-700\">Format References</button>
    </form>
    """


def _error_block(message: str) -> str:
    return f"""
    <div class=\"mt-6 bg-red-50 border border-red-200 text-red-800 rounded-lg p-4\">{escape(message)}</div>
    """


def _results_block(token: str, coordinator: ResolutionCoordinator) -> str:
    style = coordinator.active_style.value
    blocks = []

    not_found = coordinator.not_found
    if not_found:
        items = "".join(
            f"<li>Reference {idx + 1}: \"{escape(slot.query)}\"</li>" for idx, slot in not_found.items()
        )
        blocks.append(
            f"""
            <div class=\"mt-8\">
                <h2 class=\"text-xl font-semibold text-red-700\">References Not Found</h2>
                <p class=\"text-sm text-gray-600\">Try using the full title, DOI, or check for typos.</p>
                <ul class=\"mt-2 text-sm text-red-800\">{items}</ul>
            </div>
            """
        )

    pending = coordinator.awaiting_selection
    if pending:
        groups = []
        for idx, slot in pending.items():
            options = []
            for opt_idx, candidate in enumerate(slot.candidates):
                title = escape(candidate.record.title or "Unknown title")
                if opt_idx == slot.current_index:
                    options.append(f"<li class=\"font-medium\">Currently Selected: {title}</li>")
                    continue
                options.append(
                    f"""
                    <li>
                        <form action=\"/sessions/{token}/select\" method=\"post\" class=\"inline\">
                            <input type=\"hidden\" name=\"reference\" value=\"{idx}\" />
                            <input type=\"hidden\" name=\"option\" value=\"{opt_idx}\" />
                            {opt_idx + 1}. {title}
                            <button type=\"submit\" class=\"ml-2 px-2 py-1 bg-blue-600 text-white rounded text-xs\">Select This</button>
                        </form>
                    </li>
                    """
                )
            groups.append(
                f"""
                <div class=\"mt-3 bg-yellow-50 border border-yellow-200 rounded-lg p-3\">
                    <h4 class=\"font-medium text-yellow-900\">Query: \"{escape(slot.query)}\"</h4>
                    <ul class=\"mt-2 text-sm\">{''.join(options)}</ul>
                    <form action=\"/sessions/{token}/decline\" method=\"post\">
                        <input type=\"hidden\" name=\"reference\" value=\"{idx}\" />
                        <button type=\"submit\" class=\"mt-2 px-2 py-1 bg-gray-600 text-white rounded text-xs\">Select None</button>
                    </form>
                </div>
                """
            )
        blocks.append(
            f"""
            <div class=\"mt-8\">
                <h2 class=\"text-xl font-semibold text-yellow-700\">Multiple Matches Found</h2>
                {''.join(groups)}
            </div>
            """
        )

    items = "".join(f"<li>{escape(text)}</li>" for text in coordinator.formatted_results)
    downloads = "".join(
        f"<a class=\"px-3 py-1 bg-emerald-600 text-white rounded-md text-sm\" href=\"/sessions/{token}/download/{fmt}\">Download {fmt.upper()}</a>"
        for fmt in (style, "bibtex", "endnote")
    )
    blocks.append(
        f"""
        <div class=\"mt-8\">
            <h2 class=\"text-xl font-semibold text-gray-800\">Formatted References</h2>
            <form action=\"/sessions/{token}/style\" method=\"post\" class=\"mt-2\">
                <select name=\"style\" class=\"border border-gray-300 rounded-md p-1 text-sm\">{_style_options(style)}</select>
                <button type=\"submit\" class=\"ml-2 px-3 py-1 bg-indigo-600 text-white rounded-md text-sm\">Change Style</button>
            </form>
            <div class=\"flex gap-2 mt-3\">{downloads}</div>
            <ol class=\"mt-3 list-decimal list-inside text-sm text-gray-800\">{items}</ol>
        </div>
        """
    )
    return "".join(blocks)


def _session_page(token: str, coordinator: ResolutionCoordinator) -> HTMLResponse:
    content = _input_form(
        coordinator.active_style.value, "\n".join(coordinator.references), token
    ) + _results_block(token, coordinator)
    return HTMLResponse(_layout(content))


@app.get("/", response_class=HTMLResponse)
async def home() -> HTMLResponse:
    """Serve the reference submission form."""

    return HTMLResponse(_layout(_input_form(settings.default_style.value)))


@app.post("/format", response_class=HTMLResponse)
async def format_references(
    text: str = Form(""), style: str = Form("apa"), token: str = Form("")
) -> HTMLResponse:
    """Submit pasted references to the lookup service and show the results."""

    coordinator = sessions.get(token) if token else None
    if coordinator is None:
        token = token_hex(8)
        coordinator = _build_coordinator(style)
        sessions[token] = coordinator
    else:
        coordinator.change_style(style)

    try:
        applied = await coordinator.submit_async(text)
    except EmptyInput as exc:
        content = _input_form(style, text, token) + _error_block(str(exc))
        return HTMLResponse(_layout(content), status_code=400)
    except LookupFailure:
        content = _input_form(style, text, token) + _error_block(
            "Failed to format references. Please try again."
        )
        return HTMLResponse(_layout(content), status_code=502)

    if not applied:
        raise HTTPException(status_code=409, detail="Superseded by a newer submission")
    return _session_page(token, coordinator)


@app.post("/sessions/{token}/style", response_class=HTMLResponse)
async def change_style(token: str, style: str = Form(...)) -> HTMLResponse:
    coordinator = _session(token)
    coordinator.change_style(style)
    return _session_page(token, coordinator)


@app.post("/sessions/{token}/select", response_class=HTMLResponse)
async def select_option(token: str, reference: int = Form(...), option: int = Form(...)) -> HTMLResponse:
    coordinator = _session(token)
    try:
        coordinator.select_candidate(reference, option)
    except InvalidSelection as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return _session_page(token, coordinator)


@app.post("/sessions/{token}/decline", response_class=HTMLResponse)
async def select_none(token: str, reference: int = Form(...)) -> HTMLResponse:
    coordinator = _session(token)
    try:
        coordinator.decline_all(reference)
    except InvalidSelection as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return _session_page(token, coordinator)


@app.get("/sessions/{token}/download/{fmt}")
async def download(token: str, fmt: str) -> Response:
    """Proxy an export of the session's references from the backend serializer."""

    coordinator = _session(token)
    if fmt not in EXPORT_FORMATS:
        raise HTTPException(status_code=404, detail=f"Unknown export format: {fmt}")
    try:
        artifact = coordinator.download(fmt)
    except EmptyInput as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except ExportFailure as exc:
        raise HTTPException(
            status_code=502, detail="Failed to download references. Please try again."
        ) from exc
    return Response(
        content=artifact.content,
        media_type="application/octet-stream",
        headers={"Content-Disposition": f"attachment; filename=\"{artifact.file_name}\""},
    )


@app.post("/sessions/{token}/clear")
async def clear(token: str) -> Dict[str, str]:
    coordinator = sessions.pop(token, None)
    if coordinator is not None:
        _close_session(coordinator)
    return {"status": "cleared"}


def main() -> None:
    """Run the FastAPI app using uvicorn."""

    import uvicorn

    uvicorn.run("citation_formatter.web:app", host="0.0.0.0", port=8000, reload=False)


__all__ = ["app", "main"]
