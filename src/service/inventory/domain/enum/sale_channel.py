from enum import StrEnum


class SaleChannel(StrEnum):
    ONLINE = 'online'  # payment provider checkout (webhook)
    BOX_OFFICE = 'box_office'
    ADMIN = 'admin'
    SEED = 'seed'
