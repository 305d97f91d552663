"""
HTTP routes for transactions, budgets and goals.

Every route requires a session. Bodies are camelCase JSON validated with
pydantic; responses are the models dumped in JSON mode.

Error mapping:
- rejected input or operation -> 400 {message, issues}
- unknown category or goal id -> 404 {message}
- storage failure             -> 500 {message, error}
"""

from flask import Blueprint, current_app, g, jsonify, request

from fintrack.audit import create_correlation_id
from fintrack.budget import BudgetRejectedError, CategoryNotFoundError
from fintrack.goals import GoalNotFoundError, GoalRejectedError
from fintrack.models.finance import (
    BudgetTotalUpdate,
    CategoryInput,
    ContributionRequest,
    GoalCreate,
    PercentageUpdate,
)
from fintrack.orchestrator import AppComponents
from fintrack.services.storage import StorageError
from fintrack.validation import RequestRejectedError, parse_request

from fintrack.api.session import login_required


api = Blueprint("fintrack", __name__)


def _components() -> AppComponents:
    return current_app.extensions["fintrack"]


def _dump(model) -> dict:
    return model.model_dump(mode="json", by_alias=True)


def _body() -> object:
    return request.get_json(silent=True)


def _goal_with_progress(goal, progress) -> dict:
    body = _dump(goal)
    body["progress"] = _dump(progress)
    return body


@api.before_request
def assign_correlation_id():
    g.correlation_id = create_correlation_id()


# =============================================================================
# ERRORS
# =============================================================================

@api.errorhandler(RequestRejectedError)
@api.errorhandler(BudgetRejectedError)
@api.errorhandler(GoalRejectedError)
def handle_rejected(error):
    return jsonify({
        "message": str(error),
        "issues": [_dump(issue) for issue in error.issues],
    }), 400


@api.errorhandler(CategoryNotFoundError)
@api.errorhandler(GoalNotFoundError)
def handle_not_found(error):
    return jsonify({"message": str(error)}), 404


@api.errorhandler(StorageError)
def handle_storage_error(error):
    _components().audit_logger.log_storage_failure(
        operation=f"{request.method} {request.path}",
        error_message=str(error),
        user_id=g.get("user_id"),
        correlation_id=g.get("correlation_id"),
    )
    return jsonify({"message": "Internal server error", "error": str(error)}), 500


# =============================================================================
# TRANSACTIONS
# =============================================================================

@api.post("/transactions")
@login_required
def create_transaction():
    transaction, issues = _components().transaction_flow.create(
        g.user_id, _body(), correlation_id=g.correlation_id,
    )
    body = _dump(transaction)
    if issues:
        body["warnings"] = [_dump(issue) for issue in issues]
    return jsonify(body), 201


@api.get("/transactions")
@login_required
def list_transactions():
    transactions = _components().transaction_flow.list(
        g.user_id, correlation_id=g.correlation_id,
    )
    return jsonify([_dump(t) for t in transactions])


@api.get("/transactions/summary")
@login_required
def transaction_summary():
    return jsonify(_dump(_components().transaction_flow.summary(g.user_id)))


# =============================================================================
# BUDGET
# =============================================================================

@api.get("/budget")
@login_required
def get_budget():
    return jsonify(_dump(_components().budget_flow.summary(g.user_id)))


@api.put("/budget/total")
@login_required
def set_budget_total():
    update = parse_request(BudgetTotalUpdate, _body())
    summary = _components().budget_flow.set_total(
        g.user_id, update.total, correlation_id=g.correlation_id,
    )
    return jsonify(_dump(summary))


@api.put("/budget/categories/<category_id>/percentage")
@login_required
def set_category_percentage(category_id: str):
    update = parse_request(PercentageUpdate, _body())
    summary = _components().budget_flow.set_percentage(
        g.user_id, category_id, update.percentage, correlation_id=g.correlation_id,
    )
    return jsonify(_dump(summary))


@api.post("/budget/categories")
@login_required
def add_category():
    data = parse_request(CategoryInput, _body())
    category = _components().budget_flow.add_category(
        g.user_id, data.name, data.limit, correlation_id=g.correlation_id,
    )
    return jsonify(_dump(category)), 201


@api.patch("/budget/categories/<category_id>")
@login_required
def edit_category(category_id: str):
    data = parse_request(CategoryInput, _body())
    category = _components().budget_flow.edit_category(
        g.user_id, category_id, data.name, data.limit, correlation_id=g.correlation_id,
    )
    return jsonify(_dump(category))


@api.delete("/budget/categories/<category_id>")
@login_required
def delete_category(category_id: str):
    _components().budget_flow.delete_category(
        g.user_id, category_id, correlation_id=g.correlation_id,
    )
    return "", 204


# =============================================================================
# GOALS
# =============================================================================

@api.get("/goals")
@login_required
def list_goals():
    goals = _components().goal_flow.list_goals(g.user_id)
    return jsonify([_goal_with_progress(goal, progress) for goal, progress in goals])


@api.post("/goals")
@login_required
def add_goal():
    data = parse_request(GoalCreate, _body())
    goal = _components().goal_flow.add_goal(g.user_id, data, correlation_id=g.correlation_id)
    return jsonify(_dump(goal)), 201


@api.post("/goals/<goal_id>/contributions")
@login_required
def contribute_to_goal(goal_id: str):
    data = parse_request(ContributionRequest, _body())
    goal, progress = _components().goal_flow.contribute(
        g.user_id, goal_id, data.amount, correlation_id=g.correlation_id,
    )
    return jsonify(_goal_with_progress(goal, progress))


@api.delete("/goals/<goal_id>")
@login_required
def delete_goal(goal_id: str):
    _components().goal_flow.delete_goal(g.user_id, goal_id, correlation_id=g.correlation_id)
    return "", 204
