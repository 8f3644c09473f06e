"""
Local web front end (Flask) for the speed reader.

Serves one open document to one local reader:
- GET  /                       RSVP page with ORP focus
- GET  /api/state[?width=N]    current word, line and position
- GET  /api/toc                flattened table of contents
- POST /api/command/<name>     next_word, prev_word, next_line, prev_line,
                               next_section, prev_section, goto_section, save

Every command answers with the same payload as /api/state plus ``moved``.
"""

from __future__ import annotations

import logging
import threading

from flask import Flask, jsonify, render_template_string, request

from speedread.config import COMMA_PAUSE, MAX_PACE_MS, MIN_PACE_MS, SENTENCE_PAUSE, ReaderConfig
from speedread.cursor import DocumentCursor
from speedread.segmentation import compute_orp_index, estimate_pause_multiplier

log = logging.getLogger(__name__)

COMMANDS = {
    "next_word",
    "prev_word",
    "next_line",
    "prev_line",
    "next_section",
    "prev_section",
}


def build_payload(cursor: DocumentCursor, config: ReaderConfig) -> dict:
    section = cursor.current_section
    word = cursor.current_word()
    line = cursor.current_line()
    mult = 1.0
    if config.punctuation_pauses:
        mult = estimate_pause_multiplier(word, COMMA_PAUSE, SENTENCE_PAUSE)
    return {
        "ok": True,
        "title": cursor.document.title,
        "identifier": cursor.identifier,
        "section_index": cursor.section_index,
        "section_count": cursor.section_count,
        "section_error": section.error,
        "line_index": section.line_index,
        "word_index": section.word_index,
        "word": word,
        "orp": compute_orp_index(word) if word else 0,
        "line": line.text if line else None,
        "progress": section.progress(),
        "toc_path": cursor.toc_index(),
        "pace_ms": config.pace_ms,
        "interval_ms": int(config.pace_ms * mult),
    }


def create_app(cursor: DocumentCursor, config: ReaderConfig) -> Flask:
    app = Flask(__name__)
    app.config["READER_CURSOR"] = cursor
    app.config["READER_CONFIG"] = config
    lock = threading.Lock()

    @app.route("/", methods=["GET"])
    def index():
        return render_template_string(
            HTML_PAGE,
            title=cursor.document.title,
            min_pace=MIN_PACE_MS,
            max_pace=MAX_PACE_MS,
            pace=config.pace_ms,
        )

    @app.route("/api/state", methods=["GET"])
    def api_state():
        width = request.args.get("width", type=int)
        if width is not None and width < 1:
            return jsonify({"ok": False, "error": "width must be >= 1"}), 400
        with lock:
            if width is not None:
                cursor.current_section_or_resize(width)
            return jsonify(build_payload(cursor, config))

    @app.route("/api/toc", methods=["GET"])
    def api_toc():
        with lock:
            nodes = [
                {
                    "index": i,
                    "label": node.label,
                    "target": node.target,
                    "depth": node.depth,
                    "parent": node.parent,
                    "children": node.children,
                }
                for i, node in enumerate(cursor.toc.nodes)
            ]
            return jsonify({"ok": True, "nodes": nodes, "path": cursor.toc_index()})

    @app.route("/api/command/<name>", methods=["POST"])
    def api_command(name: str):
        body = request.get_json(silent=True) or {}
        with lock:
            if name in COMMANDS:
                moved = getattr(cursor, name)()
            elif name == "goto_section":
                index = body.get("index")
                if not isinstance(index, int) or isinstance(index, bool):
                    return jsonify({"ok": False, "error": "goto_section needs an integer 'index'"}), 400
                moved = cursor.goto_section(index)
            elif name == "save":
                if not cursor.doc_state().store(config.state_dir):
                    return jsonify({"ok": False, "error": "Could not save reading position"}), 500
                moved = False
            else:
                return jsonify({"ok": False, "error": f"Unknown command: {name}"}), 404

            payload = build_payload(cursor, config)
            payload["moved"] = moved
            return jsonify(payload)

    return app


def serve(cursor: DocumentCursor, config: ReaderConfig) -> None:
    app = create_app(cursor, config)
    print(f"Starting local speed reader on http://{config.host}:{config.port}")
    try:
        app.run(host=config.host, port=config.port, debug=False)
    finally:
        cursor.doc_state().store(config.state_dir)


HTML_PAGE = r"""
<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8" />
  <title>{{ title }} - Speed Reader</title>
  <meta name="viewport" content="width=device-width, initial-scale=1" />
  <style>
    :root {
      --bg: #0f1115;
      --panel: #181c24;
      --text: #e8edf5;
      --muted: #9fb0c8;
      --line: #2e3645;
      --hl: #ffd54d;
      --orp-center: #ff6f6f;
      --mono-font: "Roboto Mono", "SF Mono", Menlo, Consolas, "Liberation Mono", monospace;
      --sans-font: Inter, system-ui, -apple-system, "Segoe UI", Roboto, sans-serif;
    }
    body { margin: 0; background: var(--bg); color: var(--text); font-family: var(--sans-font); }
    header, footer { padding: 10px 16px; background: var(--panel); border-bottom: 1px solid var(--line); }
    footer { border-top: 1px solid var(--line); color: var(--muted); font-size: 14px; }
    #stage { display: flex; justify-content: center; align-items: center; height: 40vh; }
    #word { font-family: var(--mono-font); font-size: 56px; white-space: pre; }
    #word .orp { color: var(--orp-center); }
    #line { font-family: var(--mono-font); color: var(--muted); text-align: center; padding: 0 16px; }
    button { background: var(--panel); color: var(--text); border: 1px solid var(--line); padding: 6px 12px; }
  </style>
</head>
<body>
<header>
  <strong>{{ title }}</strong>
  <button id="play">Play</button>
  <label>ms/word <input id="pace" type="number" min="{{ min_pace }}" max="{{ max_pace }}" value="{{ pace }}" step="10" /></label>
  <button id="save">Save</button>
</header>
<div id="stage"><div id="word"></div></div>
<div id="line"></div>
<footer id="status"></footer>
<script>
(function () {
  const els = {
    word: document.getElementById("word"),
    line: document.getElementById("line"),
    status: document.getElementById("status"),
    play: document.getElementById("play"),
    pace: document.getElementById("pace"),
    save: document.getElementById("save"),
  };
  let running = false;
  let timer = null;
  let state = null;

  function renderWord(word, orp) {
    els.word.textContent = "";
    if (!word) return;
    const pad = Math.max(0, 12 - orp);
    els.word.append(" ".repeat(pad) + word.slice(0, orp));
    const mid = document.createElement("span");
    mid.className = "orp";
    mid.textContent = word.charAt(orp);
    els.word.append(mid, word.slice(orp + 1));
  }

  function show(s) {
    state = s;
    if (!s.ok) { els.status.textContent = s.error; return; }
    renderWord(s.word, s.orp);
    els.line.textContent = s.section_error ? "[section unavailable]" : (s.line || "");
    els.status.textContent = "Section " + (s.section_index + 1) + "/" + s.section_count +
      " (" + Math.round(s.progress * 100) + "%) " + (running ? "Running" : "Paused");
  }

  async function command(name, body) {
    const res = await fetch("/api/command/" + name, {
      method: "POST",
      headers: {"Content-Type": "application/json"},
      body: JSON.stringify(body || {}),
    });
    const s = await res.json();
    show(s);
    return s;
  }

  function schedule() {
    clearTimeout(timer);
    if (!running || !state) return;
    const pace = Number(els.pace.value) || state.pace_ms;
    const delay = state.pace_ms ? pace * state.interval_ms / state.pace_ms : pace;
    timer = setTimeout(async () => {
      const s = await command("next_word");
      if (!s.moved) { running = false; els.play.textContent = "Play"; }
      schedule();
    }, delay);
  }

  els.play.addEventListener("click", () => {
    running = !running;
    els.play.textContent = running ? "Pause" : "Play";
    schedule();
  });
  els.save.addEventListener("click", () => command("save"));

  const keys = {
    ArrowRight: "next_word", ArrowLeft: "prev_word",
    ArrowDown: "next_line", ArrowUp: "prev_line",
    PageDown: "next_section", PageUp: "prev_section",
  };
  document.addEventListener("keydown", (ev) => {
    if (ev.target === els.pace) return;
    if (ev.key === " ") { ev.preventDefault(); els.play.click(); return; }
    if (keys[ev.key]) { ev.preventDefault(); command(keys[ev.key]); }
  });

  fetch("/api/state").then((r) => r.json()).then(show);
})();
</script>
</body>
</html>
"""
