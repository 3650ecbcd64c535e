"""
Prometheus Metrics Endpoint

Exposes the product QA counters, histograms and bucket gauges for scraping.
"""

from django.http import HttpResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny


@api_view(["GET"])
@permission_classes([AllowAny])
def product_qa_metrics(request):
    """
    Prometheus metrics in text exposition format.

    **Security:** This endpoint has no authentication.
    In production, restrict access via firewall or network policy.
    """
    return HttpResponse(generate_latest(), content_type=CONTENT_TYPE_LATEST)
