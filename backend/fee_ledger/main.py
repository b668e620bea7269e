from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fee_ledger.core.config import settings
from fee_ledger.routers import billing_cycles, invoices, overdue_sweeps, payments, reports

OPENAPI_TAGS = [
    {"name": "Invoices", "description": "Create, query and delete student fee invoices."},
    {"name": "Payments", "description": "Record and remove payments against invoices."},
    {"name": "Billing Cycles", "description": "Generate one invoice per active student."},
    {"name": "Overdue Sweeps", "description": "Move unpaid invoices past due to overdue."},
    {"name": "Reports", "description": "Financial summaries over a date range."},
]

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.version,
    description=(
        "Student fee ledger API. Issue invoices, run monthly billing cycles, "
        "record payments, detect overdue invoices and report on the ledger."
    ),
    openapi_tags=OPENAPI_TAGS,
    debug=settings.DEBUG,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(invoices.router, prefix="/v1/invoices", tags=["Invoices"])
app.include_router(payments.router, prefix="/v1/payments", tags=["Payments"])
app.include_router(
    billing_cycles.router,
    prefix="/v1/billing_cycles",
    tags=["Billing Cycles"],
)
app.include_router(
    overdue_sweeps.router,
    prefix="/v1/overdue_sweeps",
    tags=["Overdue Sweeps"],
)
app.include_router(reports.router, prefix="/v1/reports", tags=["Reports"])


@app.get("/")
async def root() -> dict[str, str]:
    return {
        "app": settings.APP_NAME,
        "version": settings.version,
        "domain": settings.APP_DOMAIN,
        "status": "running",
    }
