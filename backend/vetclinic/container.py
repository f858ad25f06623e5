"""
Wiring of repositories and services.

Controllers fetch the container from ``current_app.extensions`` rather
than constructing services themselves, so tests can build one over an
in-memory store or swap single collaborators.
"""

from datetime import datetime
from typing import Callable, Optional

from flask import current_app

from vetclinic.domain.entities import local_now
from vetclinic.domain.interfaces import IDocumentStore, IEventSink
from vetclinic.repositories import (
    AppointmentRepository,
    ClinicRepository,
    MedicalRecordRepository,
    PetRepository,
    ReviewRepository,
    SqlDocumentStore,
    StoreReminderLedger,
    WorkingHoursRepository,
)
from vetclinic.services.access_policy import AccessPolicy
from vetclinic.services.appointment_service import AppointmentService
from vetclinic.services.approval_service import ApprovalCoordinator
from vetclinic.services.availability_service import (
    AvailabilityChecker,
    SlotAvailabilityService,
)
from vetclinic.services.booking_service import BookingCoordinator
from vetclinic.services.extension_service import ExtensionCoordinator
from vetclinic.services.lifecycle_service import LifecycleSweeper
from vetclinic.services.medical_record_service import MedicalRecordService
from vetclinic.services.notification_service import StoreEventSink
from vetclinic.services.reminder_service import ReminderService
from vetclinic.services.review_service import ReviewService
from vetclinic.services.slot_generator import SlotGenerator
from vetclinic.services.working_hours_service import WorkingHoursStore

EXTENSION_KEY = "vetclinic"


class ServiceContainer:
    def __init__(
        self,
        store: Optional[IDocumentStore] = None,
        event_sink: Optional[IEventSink] = None,
        clock: Callable[[], datetime] = local_now,
    ):
        self.store = store or SqlDocumentStore()
        self.event_sink = event_sink or StoreEventSink(self.store)
        self.clock = clock

        self.appointment_repo = AppointmentRepository(self.store)
        self.clinic_repo = ClinicRepository(self.store)
        self.pet_repo = PetRepository(self.store)
        self.working_hours_repo = WorkingHoursRepository(self.store)
        self.medical_record_repo = MedicalRecordRepository(self.store)
        self.review_repo = ReviewRepository(self.store)
        self.reminder_ledger = StoreReminderLedger(self.store)

        self.working_hours = WorkingHoursStore(self.working_hours_repo)
        self.slot_generator = SlotGenerator()
        self.availability = AvailabilityChecker(self.appointment_repo)
        self.slots = SlotAvailabilityService(
            self.working_hours, self.slot_generator, self.appointment_repo, clock
        )
        self.booking = BookingCoordinator(
            self.appointment_repo,
            self.clinic_repo,
            self.pet_repo,
            self.availability,
            self.event_sink,
            clock,
        )
        self.approval = ApprovalCoordinator(
            self.appointment_repo,
            self.availability,
            self.event_sink,
            self.clinic_repo,
            self.pet_repo,
        )
        self.extension = ExtensionCoordinator(
            self.appointment_repo,
            self.availability,
            self.event_sink,
            self.clinic_repo,
            self.pet_repo,
        )
        self.sweeper = LifecycleSweeper(
            self.appointment_repo,
            self.event_sink,
            self.clinic_repo,
            self.pet_repo,
            clock,
        )
        self.appointments = AppointmentService(
            self.appointment_repo,
            self.event_sink,
            self.clinic_repo,
            self.pet_repo,
            clock,
        )
        self.medical_records = MedicalRecordService(
            self.medical_record_repo, self.appointment_repo
        )
        self.reviews = ReviewService(
            self.review_repo, self.appointment_repo, self.clinic_repo
        )
        self.reminders = ReminderService(
            self.appointment_repo,
            self.clinic_repo,
            self.pet_repo,
            self.reminder_ledger,
            self.event_sink,
            clock,
        )
        self.access = AccessPolicy(self.clinic_repo)


def get_container() -> ServiceContainer:
    return current_app.extensions[EXTENSION_KEY]
