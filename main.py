import logging
from datetime import date
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import FileResponse, Response
from fastapi.staticfiles import StaticFiles
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import get_settings
from database import SessionLocal, init_db, session_scope
from models import Category, Expense
from periods import Month, parse_month, resolve_month
from schemas import (
    CategoryIn,
    CategoryOut,
    CategorySummaryOut,
    CategoryUpdate,
    ExpenseIn,
    ExpenseOut,
    ExpenseUpdate,
    MonthlySummaryOut,
)
from services import (
    CategoryNotFound,
    CategoryService,
    ConflictError,
    ExpenseService,
    NotFoundError,
    SummaryService,
    seed_default_categories,
)
from summary import MonthlySummary

settings = get_settings()
logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="Budget Tracker")


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_today() -> date:
    return date.today()


@app.on_event("startup")
def startup_event():
    logger.info(
        f"startup: database_url={settings.database_url} "
        f"static_dir={settings.static_dir}"
    )
    if settings.auto_create_schema:
        init_db()
    if settings.seed_defaults:
        with session_scope() as session:
            seed_default_categories(session)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code < 500:
        logger.info(
            f"request_rejected: {request.method} {request.url.path} "
            f"status={exc.status_code} reason={exc.detail}"
        )
    return Response(
        status_code=exc.status_code, headers=getattr(exc, "headers", None)
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.info(
        f"request_invalid: {request.method} {request.url.path} "
        f"errors={len(exc.errors())}"
    )
    return Response(status_code=400)


def month_from_request(month: Optional[str], today: date) -> Month:
    try:
        return resolve_month(month, today=today)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def category_payload(category: Category) -> CategoryOut:
    return CategoryOut(
        id=category.id,
        name=category.name,
        monthly_limit=category.monthly_limit,
        color=category.color,
        description=category.description,
    )


def expense_payload(expense: Expense) -> ExpenseOut:
    return ExpenseOut(
        id=expense.id,
        amount=expense.amount,
        description=expense.description,
        date=expense.date,
        category_id=expense.category.id,
        category_name=expense.category.name,
        category_color=expense.category.color,
    )


def summary_payload(summary: MonthlySummary) -> MonthlySummaryOut:
    return MonthlySummaryOut(
        year=summary.year,
        month=summary.month,
        total_spent=summary.total_spent,
        total_limit=summary.total_limit,
        category_breakdown=[
            CategorySummaryOut(
                category_id=row.category_id,
                category_name=row.category_name,
                category_color=row.category_color,
                spent=row.spent,
                limit=row.limit,
                percent_used=row.percent_used,
                status=row.status,
            )
            for row in summary.category_breakdown
        ],
    )


@app.get("/api/categories", response_model=list[CategoryOut])
def list_categories(db: Session = Depends(get_db)):
    return [category_payload(c) for c in CategoryService(db).list_all()]


@app.get("/api/categories/{category_id}", response_model=CategoryOut)
def get_category(category_id: int, db: Session = Depends(get_db)):
    try:
        category = CategoryService(db).get(category_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return category_payload(category)


@app.post("/api/categories", response_model=CategoryOut)
def create_category(payload: CategoryIn, db: Session = Depends(get_db)):
    try:
        category = CategoryService(db).create(payload)
    except ConflictError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return category_payload(category)


@app.put("/api/categories/{category_id}", response_model=CategoryOut)
def update_category(
    category_id: int, payload: CategoryUpdate, db: Session = Depends(get_db)
):
    try:
        category = CategoryService(db).update(category_id, payload)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return category_payload(category)


@app.delete("/api/categories/{category_id}", status_code=204)
def delete_category(category_id: int, db: Session = Depends(get_db)):
    try:
        CategoryService(db).delete(category_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return Response(status_code=204)


@app.get("/api/expenses", response_model=list[ExpenseOut])
def list_expenses(
    month: Optional[str] = None,
    category_id: Optional[int] = Query(default=None, alias="categoryId"),
    db: Session = Depends(get_db),
):
    target = None
    if month is not None:
        try:
            target = parse_month(month)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
    expenses = ExpenseService(db).list(target, category_id=category_id)
    return [expense_payload(e) for e in expenses]


@app.get("/api/expenses/{expense_id}", response_model=ExpenseOut)
def get_expense(expense_id: int, db: Session = Depends(get_db)):
    try:
        expense = ExpenseService(db).get(expense_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return expense_payload(expense)


@app.post("/api/expenses", response_model=ExpenseOut)
def create_expense(payload: ExpenseIn, db: Session = Depends(get_db)):
    try:
        expense = ExpenseService(db).create(payload)
    except CategoryNotFound as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return expense_payload(expense)


@app.put("/api/expenses/{expense_id}", response_model=ExpenseOut)
def update_expense(
    expense_id: int, payload: ExpenseUpdate, db: Session = Depends(get_db)
):
    try:
        expense = ExpenseService(db).update(expense_id, payload)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return expense_payload(expense)


@app.delete("/api/expenses/{expense_id}", status_code=204)
def delete_expense(expense_id: int, db: Session = Depends(get_db)):
    try:
        ExpenseService(db).delete(expense_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return Response(status_code=204)


@app.get("/api/summary", response_model=MonthlySummaryOut)
def monthly_summary(
    month: Optional[str] = None,
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    target = month_from_request(month, today)
    summary = SummaryService(db).monthly_summary(target)
    return summary_payload(summary)


@app.get("/", include_in_schema=False)
def spa_index():
    return FileResponse(settings.static_dir / "index.html", media_type="text/html")


# Mounted last so the API routes above take precedence.
app.mount(
    "/",
    StaticFiles(directory=settings.static_dir, html=True, check_dir=False),
    name="static",
)
