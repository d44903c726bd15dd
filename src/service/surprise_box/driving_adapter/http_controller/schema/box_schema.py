from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class BoxResponse(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            'example': {
                'id': 42,
                'store_id': 3,
                'category_id': 2,
                'title': 'Bakery surprise',
                'original_price': 30000,
                'discounted_price': 9900,
                'status': 'reserved',
                'reserved_by': 7,
                'reservation_expires_at': '2025-06-01T18:05:00Z',
                'business_name': 'Good Bakery',
                'store_city': 'Kyiv',
            }
        }
    )

    id: int
    store_id: int
    category_id: int
    title: str
    description: Optional[str] = None
    original_price: int
    discounted_price: int
    image_url: Optional[str] = None
    pickup_start_time: datetime
    pickup_end_time: datetime
    sale_start_time: datetime
    sale_end_time: datetime
    status: str
    reserved_by: Optional[int] = None
    reserved_at: Optional[datetime] = None
    reservation_expires_at: Optional[datetime] = None
    business_name: Optional[str] = None
    store_address: Optional[str] = None
    store_city: Optional[str] = None
    category_name: Optional[str] = None


class ReleaseReservationResponse(BaseModel):
    surprise_box_id: int
    released: bool
