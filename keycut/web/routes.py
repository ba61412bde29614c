"""Web UI routes for Keycut.

A job is one uploaded file. Upload probes it, ``/plan`` previews how a range
would be cut, and ``/cut`` resolves the range up front (so bad ranges are
rejected with 400) before running ffmpeg on a worker thread.
"""

import shutil
import threading
import uuid
from dataclasses import dataclass, field
from pathlib import Path

from flask import Blueprint, current_app, jsonify, render_template, request, send_file

from keycut import ffutil
from keycut.engine import plan_cut, run_plan
from keycut.errors import EngineFailure, KeycutError
from keycut.logging_config import logger
from keycut.manifest import CutManifest
from keycut.models import CutCase, CutPlan, MediaInfo
from keycut.timeparse import format_seconds

bp = Blueprint("web", __name__, template_folder="templates")


@dataclass
class CutJob:
    id: str
    dir: Path
    input_path: Path
    filename: str
    media: MediaInfo
    status: str = "uploaded"
    stage: str | None = None
    progress: float = 0.0
    plan: CutPlan | None = None
    result: dict | None = None
    error: str | None = None
    worker: threading.Thread | None = field(default=None, repr=False)

    @property
    def output_path(self) -> Path:
        return self.dir / f"output{self.input_path.suffix}"


# In-memory job store: job_id -> CutJob
_jobs: dict[str, CutJob] = {}


def _seconds(value) -> str | None:
    return None if value is None else format_seconds(value)


def media_json(media: MediaInfo) -> dict:
    return {
        "codec": media.codec_name,
        "fps": f"{media.fps[0]}/{media.fps[1]}" if media.fps else None,
        "duration": format_seconds(media.duration),
        "has_audio": media.has_audio,
    }


def plan_json(plan: CutPlan) -> dict:
    """Serialize a CutPlan; times stay exact decimal strings."""
    return {
        "case": plan.case.value,
        "start": format_seconds(plan.start_raw),
        "end": format_seconds(plan.end_time),
        "prev_keyframe": format_seconds(plan.prev_keyframe),
        "next_keyframe": format_seconds(plan.next_keyframe),
        "start_offset": _seconds(plan.start_offset),
        "end_offset": _seconds(plan.end_offset),
        "keyframe_offset": _seconds(plan.keyframe_offset),
        "reencoded": plan.case is not CutCase.ON_KEYFRAME,
    }


def job_json(job: CutJob) -> dict:
    resp = {
        "id": job.id,
        "status": job.status,
        "filename": job.filename,
        "media": media_json(job.media),
        "stage": job.stage,
        "progress": job.progress,
    }
    if job.plan is not None:
        resp["plan"] = plan_json(job.plan)
    if job.result is not None:
        resp["result"] = job.result
    if job.error is not None:
        resp["error"] = job.error
    return resp


def _get_job(job_id: str) -> CutJob | None:
    return _jobs.get(job_id)


def _manifest_for(job: CutJob) -> CutManifest | tuple:
    body = request.get_json(silent=True) or {}
    start = str(body.get("start", "")).strip()
    end = str(body.get("end", "")).strip()
    if not start or not end:
        return jsonify({"error": "Both 'start' and 'end' are required"}), 400
    return CutManifest(
        input=job.input_path,
        output=job.output_path,
        start=start,
        end=end,
        engine=current_app.config["ENGINE"],
    )


@bp.route("/")
def index():
    return render_template("index.html")


@bp.route("/api/upload", methods=["POST"])
def upload():
    f = request.files.get("file")
    if f is None or not f.filename:
        return jsonify({"error": "No file provided"}), 400

    job_id = uuid.uuid4().hex[:12]
    job_dir = Path(current_app.config["WORK_DIR"]) / job_id
    job_dir.mkdir(parents=True, exist_ok=True)
    input_path = job_dir / f"input{Path(f.filename).suffix or '.mp4'}"
    f.save(input_path)

    try:
        media = ffutil.probe(input_path)
    except KeycutError as e:
        shutil.rmtree(job_dir, ignore_errors=True)
        return jsonify({"error": str(e)}), 400

    job = CutJob(id=job_id, dir=job_dir, input_path=input_path, filename=f.filename, media=media)
    _jobs[job_id] = job
    return jsonify(job_json(job))


@bp.route("/api/jobs/<job_id>/plan", methods=["POST"])
def preview_plan(job_id: str):
    job = _get_job(job_id)
    if job is None:
        return jsonify({"error": "Job not found"}), 404

    manifest = _manifest_for(job)
    if isinstance(manifest, tuple):
        return manifest
    try:
        _, plan = plan_cut(manifest, media=job.media)
    except KeycutError as e:
        return jsonify({"error": str(e), "stage": e.stage}), 400
    return jsonify(plan_json(plan))


@bp.route("/api/jobs/<job_id>/cut", methods=["POST"])
def start_cut(job_id: str):
    job = _get_job(job_id)
    if job is None:
        return jsonify({"error": "Job not found"}), 404
    if job.status == "processing":
        return jsonify({"error": "Job is already processing"}), 409

    manifest = _manifest_for(job)
    if isinstance(manifest, tuple):
        return manifest
    try:
        _, plan = plan_cut(manifest, media=job.media)
    except KeycutError as e:
        return jsonify({"error": str(e), "stage": e.stage}), 400

    job.plan = plan
    job.status = "processing"
    job.stage, job.progress = "Queued", 0.0
    job.result = job.error = None

    def on_progress(stage: str, frac: float) -> None:
        job.stage, job.progress = stage, round(frac, 3)

    def run():
        try:
            result = run_plan(manifest, job.media, plan, on_progress=on_progress)
            job.result = {
                "duration_requested": format_seconds(result.duration_requested),
                "duration_final": format_seconds(result.duration_final),
            }
            job.status = "done"
        except EngineFailure as e:
            job.error = str(e)
            job.status = "error"
        except Exception as e:
            logger.exception("Cut job %s crashed", job.id)
            job.error = str(e)
            job.status = "error"

    body = job_json(job)
    job.worker = threading.Thread(target=run, daemon=True)
    job.worker.start()
    return jsonify(body), 202


@bp.route("/api/jobs/<job_id>")
def job_status(job_id: str):
    job = _get_job(job_id)
    if job is None:
        return jsonify({"error": "Job not found"}), 404
    return jsonify(job_json(job))


@bp.route("/api/jobs/<job_id>/result")
def download_result(job_id: str):
    job = _get_job(job_id)
    if job is None:
        return jsonify({"error": "Job not found"}), 404
    if job.status != "done":
        return jsonify({"error": "Job not complete"}), 409

    stem = Path(job.filename).stem
    return send_file(
        job.output_path,
        as_attachment=True,
        download_name=f"{stem}_cut{job.output_path.suffix}",
    )
