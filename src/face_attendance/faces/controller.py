from __future__ import annotations

from flask import Flask, request

from ..common.http import fail, respond, roles_required
from ..container import Container
from ..core.enums import ErrorCode, Role
from ..core.result import Result
from .model import DetectionResult


def register(app: Flask, container: Container) -> None:
    @app.route("/api/faces/enroll", methods=["POST"], endpoint="api_faces_enroll")
    @roles_required(Role.ADMIN, Role.HR)
    def api_faces_enroll():
        data = request.get_json(silent=True) or {}
        try:
            user_id = int(data["user_id"])
            vector = data["embedding"]
            detection = DetectionResult.from_dict(data["detection"]) if data.get("detection") else None
        except (KeyError, TypeError, ValueError) as e:
            return fail(ErrorCode.INVALID_REQUEST, f"Invalid request: {e}")

        result = container.enrollment_service.enroll(
            user_id=user_id, vector=vector, detection=detection, label=data.get("label")
        )
        if not result.success:
            return respond(result)

        emb = result.data
        summary = {
            "embedding_id": emb.embedding_id,
            "user_id": emb.user_id,
            "dimension": emb.dimension,
            "captured_at": emb.captured_at,
            "label": emb.label,
        }
        return respond(Result.ok(summary, message=result.message), status=201)

    @app.route("/api/faces/embeddings/<int:embedding_id>", methods=["DELETE"], endpoint="api_faces_revoke")
    @roles_required(Role.ADMIN, Role.HR)
    def api_faces_revoke(embedding_id: int):
        return respond(container.enrollment_service.revoke(embedding_id))
