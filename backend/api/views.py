"""REST API view serving the unified Biowetter record."""
from __future__ import annotations

import logging

from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from backend.api.schemas import BiowetterRecordSchema
from biowetter.config import BiowetterConfig
from biowetter.services.biowetter import BiowetterService


logger = logging.getLogger(__name__)


def build_service() -> BiowetterService:
    """A fresh service per request; nothing is shared between requests."""
    return BiowetterService(BiowetterConfig.from_env())


class BiowetterView(APIView):
    """Return today's Biowetter record for the configured region."""

    permission_classes = [AllowAny]
    http_method_names = ["get"]

    def get(self, request, *args, **kwargs):  # noqa: D401
        """Return the unified record; fallback data still answers 200."""
        try:
            record = build_service().collect()
            payload = BiowetterRecordSchema.from_record(record).to_payload()
        except Exception as exc:  # noqa: BLE001 - surfaced to the client as a 500
            logger.error("Biowetter request failed", exc_info=exc)
            return Response(
                {"error": str(exc) or exc.__class__.__name__},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )
        return Response(payload, status=status.HTTP_200_OK)

    def http_method_not_allowed(self, request, *args, **kwargs):
        return Response({"error": "Method not allowed"}, status=status.HTTP_405_METHOD_NOT_ALLOWED)
