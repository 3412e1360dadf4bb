from __future__ import annotations

from datetime import date

from django.core.exceptions import ValidationError
from django.test import TestCase

from arrivals.models import Arrival
from locations.models import Kunchinittu, Warehouse
from milling.models import Outturn


class ArrivalModelTests(TestCase):
    @classmethod
    def setUpTestData(cls) -> None:
        warehouse = Warehouse.objects.create(name="Main", code="WH1")
        cls.k1 = Kunchinittu.objects.create(name="Yard 1", code="K1", warehouse=warehouse)
        cls.outturn = Outturn.objects.create(
            code="OUT01",
            allotted_variety="RNR",
            is_cleared=True,
            cleared_on=date(2024, 1, 5),
        )

    def test_shifting_needs_both_kunchinittus(self) -> None:
        arrival = Arrival(sl_no="S1", date=date(2024, 1, 2), movement_type=Arrival.MovementType.SHIFTING, from_kunchinittu=self.k1)
        with self.assertRaises(ValidationError):
            arrival.clean()

    def test_production_shifting_needs_an_outturn(self) -> None:
        arrival = Arrival(
            sl_no="P1",
            date=date(2024, 1, 2),
            movement_type=Arrival.MovementType.PRODUCTION_SHIFTING,
            from_kunchinittu=self.k1,
        )
        with self.assertRaises(ValidationError):
            arrival.clean()

    def test_no_movements_into_a_cleared_outturn(self) -> None:
        arrival = Arrival(
            sl_no="P2",
            date=date(2024, 1, 6),
            movement_type=Arrival.MovementType.PRODUCTION_SHIFTING,
            from_kunchinittu=self.k1,
            outturn=self.outturn,
        )
        with self.assertRaisesMessage(ValidationError, "cleared"):
            arrival.clean()

    def test_movement_on_the_clearing_day_is_allowed(self) -> None:
        arrival = Arrival(
            sl_no="P3",
            date=date(2024, 1, 5),
            movement_type=Arrival.MovementType.PRODUCTION_SHIFTING,
            from_kunchinittu=self.k1,
            outturn=self.outturn,
        )
        arrival.clean()
