# Overview: HTTP routes for reports; thin wrappers that parse query args and call report services.

from flask import Blueprint, current_app, g, jsonify, request

from ..decorators import require_principal
from ..services import breakdown_service, detail_service, reporting_service
from ..services.report_filters import build_report_filters
from ..validation import ValidationError, parse_choice, parse_int


reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


def _role_ids_arg():
    values = request.args.getlist("role_ids")
    if len(values) == 1:
        return values[0]
    return values or None


def _filters_from_request():
    """Build ReportFilters from the query string, scoped to the requesting principal."""
    args = request.args
    return build_report_filters(
        g.current_user,
        start_date=args.get("start_date"),
        end_date=args.get("end_date"),
        principal_id=args.get("principal_id"),
        customer_id=args.get("customer_id"),
        department=args.get("department"),
        role_ids=_role_ids_arg(),
        warehouse_id=args.get("warehouse_id"),
        record_kind=args.get("record_kind"),
        activity=args.get("activity"),
        status=args.get("status"),
        delivery_status=args.get("delivery_status"),
        inactive_days=args.get("inactive_days"),
        sort_by=args.get("sort_by"),
        sort_order=args.get("sort_order"),
        page=args.get("page"),
        limit=args.get("limit"),
    )


def _run_report(description: str, build):
    try:
        return jsonify(build()), 200
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except reporting_service.ReportNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except reporting_service.ReportError as e:
        current_app.logger.exception("Failed to generate %s", description)
        return jsonify({"error": str(e)}), 500


@reports_bp.get("/executives")
@require_principal
def executive_report():
    return _run_report(
        "executive report",
        lambda: reporting_service.executive_report(_filters_from_request()),
    )


@reports_bp.get("/executives/breakdown")
@require_principal
def executive_breakdown():
    def build():
        period = parse_choice(
            request.args.get("period"),
            "period",
            tuple(breakdown_service.PERIOD_FORMATS),
            default=breakdown_service.PERIOD_DAY,
        )
        filters = _filters_from_request()
        return {
            "period": period,
            "breakdown": breakdown_service.executive_breakdown(filters, period),
            "date_range": filters.date_range_dict(),
        }

    return _run_report("executive breakdown", build)


@reports_bp.get("/executives/<int:user_id>")
@require_principal
def executive_detail(user_id: int):
    return _run_report(
        "executive performance detail",
        lambda: detail_service.executive_detail(user_id, _filters_from_request()),
    )


@reports_bp.get("/warehouses")
@require_principal
def warehouse_report():
    return _run_report(
        "warehouse report",
        lambda: reporting_service.warehouse_report(_filters_from_request()),
    )


@reports_bp.get("/customers")
@require_principal
def customer_report():
    return _run_report(
        "customer report",
        lambda: reporting_service.customer_report(_filters_from_request()),
    )


@reports_bp.get("/customers/inactive")
@require_principal
def inactive_customers_report():
    def build():
        days = parse_int(
            request.args.get("days"),
            "days",
            default=reporting_service.DEFAULT_INACTIVE_DAYS,
            minimum=1,
        )
        return reporting_service.inactive_customers_report(_filters_from_request(), days=days)

    return _run_report("inactive customers report", build)


@reports_bp.get("/customers/<int:customer_id>")
@require_principal
def customer_detail(customer_id: int):
    return _run_report(
        "customer purchase detail",
        lambda: detail_service.customer_detail(customer_id, _filters_from_request()),
    )
