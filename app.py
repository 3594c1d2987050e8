"""Flask application exposing an HTTP interface for the tag cloud generator."""
from __future__ import annotations

import os
import time
from collections import OrderedDict
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from flask import Flask, jsonify, render_template_string, request
from werkzeug.utils import secure_filename

from tagcloud_core import (
    DEFAULT_MAX_FONT,
    DEFAULT_MAX_ITEMS,
    DEFAULT_MIN_FONT,
    DEFAULT_SEPARATORS,
    TagCloud,
    TagCloudConfig,
    TagCloudError,
    count_words_in_path,
    generate_tag_cloud_from_counts,
    generate_tag_cloud_from_text,
)

BASE_DIR = Path(__file__).resolve().parent
UPLOAD_DIR = BASE_DIR / "data" / "uploads"

app = Flask(__name__)

CACHE_ENABLED = os.environ.get("TAGCLOUD_CACHE", "1").lower() not in {"0", "false", "no"}
CACHE_CAPACITY = max(1, int(os.environ.get("TAGCLOUD_CACHE_MAX", "8") or 8))
COUNT_CACHE: OrderedDict[tuple, Dict[str, int]] = OrderedDict()

INDEX_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head><meta charset="utf-8"/><title>Tag Cloud Generator</title></head>
<body>
  <h1>Tag Cloud Generator</h1>
  <form action="{{ url_for('upload') }}" method="post" enctype="multipart/form-data">
    <input type="file" name="file"/>
    <button type="submit">Upload</button>
  </form>
  <p>POST <code>/api/generate</code> with <code>textPath</code> or <code>text</code>,
  <code>count</code> (default {{ default_count }}), <code>minFont</code> and <code>maxFont</code>.</p>
</body>
</html>
"""


def build_config(payload: Mapping[str, Any]) -> TagCloudConfig:
    config = TagCloudConfig(
        separators=str(payload.get("separators", DEFAULT_SEPARATORS)),
        max_items=int(payload.get("count", DEFAULT_MAX_ITEMS)),
        min_font_size=int(payload.get("minFont", DEFAULT_MIN_FONT)),
        max_font_size=int(payload.get("maxFont", DEFAULT_MAX_FONT)),
    )
    if config.max_items <= 0:
        raise ValueError("count must be a positive integer")
    config.validate()
    return config


def build_cache_key(path: Path, config: TagCloudConfig) -> tuple:
    stat = path.stat()
    return (
        str(path),
        int(stat.st_mtime_ns),
        "".join(sorted(config.separator_set())),
        config.encoding,
    )


def get_cached_counts(path: Path, config: TagCloudConfig) -> tuple[Optional[tuple], Optional[Dict[str, int]]]:
    if not CACHE_ENABLED:
        return None, None
    try:
        key = build_cache_key(path, config)
    except OSError:
        return None, None
    entry = COUNT_CACHE.get(key)
    if entry is not None:
        COUNT_CACHE.move_to_end(key)
    return key, entry


def store_cache_entry(cache_key: Optional[tuple], counts: Dict[str, int]) -> None:
    if not CACHE_ENABLED or cache_key is None:
        return
    COUNT_CACHE[cache_key] = counts
    COUNT_CACHE.move_to_end(cache_key)
    while len(COUNT_CACHE) > CACHE_CAPACITY:
        COUNT_CACHE.popitem(last=False)


def build_summary(cloud: TagCloud) -> Dict[str, Any]:
    return {
        "source": cloud.source_name,
        "requested": cloud.requested,
        "selected": cloud.selected,
        "totalWords": cloud.total_words,
        "distinctWords": cloud.distinct_words,
        "minCount": cloud.min_count,
        "maxCount": cloud.max_count,
    }


def resolve_input_path(path_str: str) -> Path:
    candidate = (BASE_DIR / path_str).resolve() if not Path(path_str).is_absolute() else Path(path_str).resolve()
    if BASE_DIR not in candidate.parents and candidate != BASE_DIR:
        raise ValueError("Input path must stay within the project directory")
    if not candidate.is_file():
        raise FileNotFoundError(candidate)
    return candidate


@app.get("/")
def index() -> str:
    return render_template_string(INDEX_TEMPLATE, default_count=DEFAULT_MAX_ITEMS)


@app.post("/api/upload")
def upload() -> Any:
    if "file" not in request.files:
        return jsonify({"error": "No file part"}), 400
    file = request.files["file"]
    if not file or file.filename == "":
        return jsonify({"error": "No selected file"}), 400

    timestamp = int(time.time())
    filename = secure_filename(file.filename) or f"upload-{timestamp}.txt"
    UPLOAD_DIR.mkdir(parents=True, exist_ok=True)
    destination = UPLOAD_DIR / f"{timestamp}-{filename}"
    file.save(destination)
    app.logger.info("Stored upload %s", destination)

    return jsonify({
        "textPath": str(destination.relative_to(BASE_DIR)),
        "filename": filename,
        "stored": str(destination),
    })


@app.post("/api/generate")
def generate() -> Any:
    payload = request.get_json(silent=True) if request.is_json else request.form.to_dict(flat=True)
    payload = payload or {}

    try:
        config = build_config(payload)
    except (TypeError, ValueError) as exc:
        return jsonify({"error": str(exc)}), 400

    text_path = payload.get("textPath")
    raw_text = payload.get("text")

    if text_path:
        try:
            path = resolve_input_path(str(text_path))
        except FileNotFoundError:
            return jsonify({"error": f"Input file not found: {text_path}"}), 404
        except ValueError as exc:
            return jsonify({"error": str(exc)}), 400

        use_cache = CACHE_ENABLED and not payload.get("skipCache")
        cache_key, counts = get_cached_counts(path, config) if use_cache else (None, None)
        if counts is None:
            try:
                counts = count_words_in_path(path, config=config)
            except TagCloudError as exc:
                app.logger.warning("%s", exc)
                return jsonify({"error": str(exc)}), 422
            if use_cache:
                store_cache_entry(cache_key, counts)
        cloud = generate_tag_cloud_from_counts(counts, config=config, source_name=path.name)
    elif isinstance(raw_text, str):
        source_name = str(payload.get("sourceName") or "request")
        cloud = generate_tag_cloud_from_text(raw_text, config=config, source_name=source_name)
    else:
        return jsonify({"error": "textPath or text missing"}), 400

    response: Dict[str, Any] = {
        "words": [entry.to_dict() for entry in cloud.entries],
        "summary": build_summary(cloud),
    }
    if payload.get("returnHtml"):
        response["html"] = cloud.to_html()
    return jsonify(response)


if __name__ == "__main__":
    app.run(debug=True)
