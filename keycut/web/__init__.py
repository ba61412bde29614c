"""Flask application factory for the Keycut web UI."""

import tempfile
from pathlib import Path

from flask import Flask, jsonify

from keycut.manifest import EngineConfig


def create_app(work_dir: Path | None = None, engine: EngineConfig | None = None) -> Flask:
    app = Flask(__name__)
    app.config["WORK_DIR"] = Path(work_dir) if work_dir else Path(tempfile.mkdtemp(prefix="keycut_web_"))
    app.config["ENGINE"] = engine or EngineConfig()
    app.config["MAX_CONTENT_LENGTH"] = 10 * 1024 * 1024 * 1024  # 10 GB

    from keycut.web.routes import bp
    app.register_blueprint(bp)

    @app.errorhandler(413)
    def request_entity_too_large(error):
        return jsonify({"error": "File too large"}), 413

    return app
