import logging

from flask import Blueprint, request, jsonify, abort

from esg_engine.calculations.run_module import (
    CALCULATORS, MODULE_IDS, UnknownModuleError, aggregate_results, module_title, run_module,
)

logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__, url_prefix="/api")


def _module_input():
    """JSON body as a module input snapshot. An empty body counts as {}."""
    if not request.data:
        return {}
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        abort(400, description="Request body must be a JSON object.")
    return data


@api_bp.route("/modules")
def list_modules():
    return jsonify([
        {"moduleId": module_id, "title": CALCULATORS[module_id].title}
        for module_id in MODULE_IDS
    ])


@api_bp.route("/modules/<module_id>", methods=["POST"])
def calculate_module(module_id):
    """Run a single module calculator against the posted input."""
    input_data = _module_input()
    try:
        title = module_title(module_id)
    except UnknownModuleError as e:
        abort(404, description=str(e))

    result = run_module(module_id, input_data)
    if result["warnings"]:
        logger.info(f"{module_id}: {len(result['warnings'])} warning(s)")
    return jsonify({"moduleId": module_id, "title": title, "result": result})


@api_bp.route("/report", methods=["POST"])
def report():
    """Run every module in canonical order."""
    input_data = _module_input()
    return jsonify({"results": aggregate_results(input_data)})
