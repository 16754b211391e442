# autowheel/api/routes.py
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, File, Header, HTTPException, Query, UploadFile
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from .. import auth, crud, schemas, services
from ..bus import InquiryQueueBus
from ..console import AdminInquiryConsole
from ..db import SessionLocal, get_db
from ..images import UploadError, upload_image
from ..inquiries import InquiryQueue, submit_inquiry
from ..storage import SqlStore
from ..utils import logger

router = APIRouter()

_store = None
_bus = None


def inquiry_store() -> SqlStore:
    global _store
    if _store is None:
        _store = SqlStore(SessionLocal)
    return _store


def get_inquiry_queue() -> InquiryQueue:
    return InquiryQueue(inquiry_store())


def get_inquiry_bus() -> InquiryQueueBus:
    global _bus
    if _bus is None:
        _bus = InquiryQueueBus(inquiry_store())
    return _bus


def get_console(
    queue: InquiryQueue = Depends(get_inquiry_queue),
    bus: InquiryQueueBus = Depends(get_inquiry_bus),
):
    console = AdminInquiryConsole(queue, bus).mount()
    try:
        yield console
    finally:
        console.unmount()


@router.get("/health")
def health():
    return {"status": "ok"}

# ----------------------- Auth -----------------------
@router.post("/auth/login")
def login(payload: schemas.LoginRequest):
    if not auth.check_credentials(payload.email, payload.password):
        logger.warning("Failed admin login for %s", payload.email)
        raise HTTPException(status_code=401, detail="Invalid email or password")
    return {"token": auth.issue_token(), "user": auth.admin_user()}


@router.post("/auth/logout")
def logout(authorization: Optional[str] = Header(None)):
    auth.revoke_token(auth.bearer_token(authorization))
    return {"status": "logged out"}


@router.get("/auth/verify")
def verify(user: dict = Depends(auth.require_admin)):
    return {"valid": True, "user": user}

# ----------------------- Cars -----------------------
@router.get("/cars", response_model=schemas.CarPage)
def list_cars(
    q: Optional[str] = None,
    make: Optional[str] = None,
    fuel_type: Optional[str] = None,
    category: Optional[str] = None,
    engine_cc: Optional[str] = None,
    vehicle_grade: Optional[str] = None,
    transmission: Optional[str] = None,
    min_price: Optional[float] = Query(None, ge=0),
    max_price: Optional[float] = Query(None, ge=0),
    hot_deals_only: bool = False,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    filters = schemas.FilterState(
        make=make,
        fuel_type=fuel_type,
        category=category,
        engine_cc=engine_cc,
        vehicle_grade=vehicle_grade,
        transmission=transmission,
        min_price=min_price,
        max_price=max_price,
        hot_deals_only=hot_deals_only,
    )
    return services.search_catalog(db, q, filters, page=page, limit=limit)


@router.get("/cars/search", response_model=List[schemas.CarOut])
def search_cars(q: str = "", db: Session = Depends(get_db)):
    return services.search_catalog(db, q, schemas.FilterState(), page=1, limit=10_000).data


@router.get("/cars/{car_id}", response_model=schemas.CarOut)
def get_car(car_id: int, db: Session = Depends(get_db)):
    obj = crud.get_car(db, car_id)
    if not obj:
        raise HTTPException(status_code=404, detail="Car not found")
    return obj


@router.post("/cars", response_model=schemas.CarOut, status_code=201)
def create_car(payload: schemas.CarCreate, db: Session = Depends(get_db), _admin: dict = Depends(auth.require_admin)):
    return services.create_car(db, payload)


@router.put("/cars/{car_id}", response_model=schemas.CarOut)
def update_car(car_id: int, payload: schemas.CarUpdate, db: Session = Depends(get_db),
               _admin: dict = Depends(auth.require_admin)):
    obj = services.update_car(db, car_id, payload)
    if not obj:
        raise HTTPException(status_code=404, detail="Car not found")
    return obj


@router.delete("/cars/{car_id}")
def delete_car(car_id: int, db: Session = Depends(get_db), _admin: dict = Depends(auth.require_admin)):
    ok = crud.delete_car(db, car_id)
    if not ok:
        raise HTTPException(status_code=404, detail="Car not found")
    return {"status": "deleted"}


@router.post("/cars/{car_id}/view")
def view_car(car_id: int, db: Session = Depends(get_db)):
    views = crud.increment_views(db, car_id)
    if views is None:
        raise HTTPException(status_code=404, detail="Car not found")
    return {"views": views}

# ----------------------- Inquiries -----------------------
@router.post("/inquiries", status_code=201)
def create_inquiry(
    payload: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    queue: InquiryQueue = Depends(get_inquiry_queue),
    bus: InquiryQueueBus = Depends(get_inquiry_bus),
):
    form = dict(payload)
    car_id = form.pop("car_id", None)
    try:
        car = crud.get_car(db, int(car_id)) if car_id is not None else None
    except (TypeError, ValueError):
        car = None
    if car is None:
        raise HTTPException(status_code=404, detail="Car not found")

    handoffs: List[str] = []
    result = submit_inquiry(car, form, queue, bus, opener=handoffs.append)
    if not result.ok:
        if result.field_errors:
            return JSONResponse(status_code=422, content={"ok": False, "field_errors": result.field_errors})
        raise HTTPException(status_code=503, detail=result.reason)
    return {
        "ok": True,
        "inquiry": result.inquiry.model_dump(mode="json"),
        "whatsapp_url": result.handoff_url,
    }


@router.get("/inquiries", response_model=List[schemas.InquiryRecord], dependencies=[Depends(auth.require_admin)])
def list_inquiries(
    status: Optional[schemas.InquiryStatus] = None,
    car_id: Optional[str] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    console: AdminInquiryConsole = Depends(get_console),
):
    return console.list(status=status, car_id=car_id, start=start, end=end)


@router.get("/inquiries/statistics", response_model=schemas.InquiryStatistics, dependencies=[Depends(auth.require_admin)])
def inquiry_statistics(console: AdminInquiryConsole = Depends(get_console)):
    return console.statistics()


@router.get("/inquiries/{inquiry_id}", response_model=schemas.InquiryRecord, dependencies=[Depends(auth.require_admin)])
def get_inquiry(inquiry_id: str, console: AdminInquiryConsole = Depends(get_console)):
    record = console.get(inquiry_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Inquiry not found")
    return record


@router.get("/inquiries/{inquiry_id}/contact", dependencies=[Depends(auth.require_admin)])
def inquiry_contact(inquiry_id: str, console: AdminInquiryConsole = Depends(get_console)):
    url = console.contact_url(inquiry_id)
    if url is None:
        raise HTTPException(status_code=404, detail="Inquiry not found")
    return {"url": url}


@router.patch("/inquiries/{inquiry_id}/status", response_model=schemas.InquiryRecord, dependencies=[Depends(auth.require_admin)])
def update_inquiry_status(inquiry_id: str, payload: schemas.InquiryStatusUpdate,
                          console: AdminInquiryConsole = Depends(get_console)):
    changes = payload.model_dump(include={"admin_notes", "follow_up_date"}, exclude_unset=True)
    record = console.update_status(inquiry_id, payload.status, **changes)
    if record is None:
        raise HTTPException(status_code=404, detail="Inquiry not found")
    return record


@router.delete("/inquiries/{inquiry_id}", dependencies=[Depends(auth.require_admin)])
def delete_inquiry(inquiry_id: str, console: AdminInquiryConsole = Depends(get_console)):
    if not console.delete(inquiry_id):
        raise HTTPException(status_code=404, detail="Inquiry not found")
    return {"status": "deleted"}

# ----------------------- Success stories -----------------------
@router.get("/success-stories", response_model=List[schemas.SuccessStoryOut])
def list_stories(db: Session = Depends(get_db)):
    return crud.list_stories(db)


@router.post("/success-stories", response_model=schemas.SuccessStoryOut, status_code=201)
def create_story(payload: schemas.SuccessStoryCreate, db: Session = Depends(get_db),
                 _admin: dict = Depends(auth.require_admin)):
    return crud.create_story(db, payload.model_dump())


@router.put("/success-stories/{story_id}", response_model=schemas.SuccessStoryOut)
def update_story(story_id: int, payload: schemas.SuccessStoryUpdate, db: Session = Depends(get_db),
                 _admin: dict = Depends(auth.require_admin)):
    obj = crud.update_story(db, story_id, payload.model_dump(exclude_unset=True))
    if not obj:
        raise HTTPException(status_code=404, detail="Story not found")
    return obj


@router.delete("/success-stories/{story_id}")
def delete_story(story_id: int, db: Session = Depends(get_db), _admin: dict = Depends(auth.require_admin)):
    if not crud.delete_story(db, story_id):
        raise HTTPException(status_code=404, detail="Story not found")
    return {"status": "deleted"}

# ----------------------- Uploads -----------------------
@router.post("/uploads/image")
def upload(file: UploadFile = File(...), _admin: dict = Depends(auth.require_admin)):
    try:
        url = upload_image(file.file.read(), file.filename or "upload")
    except UploadError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return {"url": url}
