import logging

from asgiref.sync import async_to_sync
from django.core.management.base import BaseCommand, CommandError

from infrastructure.container import container
from product_qa.domain.exceptions import QAError
from product_qa.domain.records import Actor
from product_qa.domain.services import BUCKET_NAMES, QAScreenSession


logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Review product QA records from the command line."

    def add_arguments(self, parser):
        who = parser.add_mutually_exclusive_group()
        who.add_argument("--moderator", default="cli", help="Moderator id to act as (default: cli)")
        who.add_argument("--seller", help="Act as this seller instead of a moderator")

        sub = parser.add_subparsers(dest="action", required=True)

        list_parser = sub.add_parser("list", help="List records by QA bucket")
        list_parser.add_argument("--bucket", choices=BUCKET_NAMES)

        show = sub.add_parser("show", help="Show one record")
        show.add_argument("listing_id")

        for name, help_text in (("approve", "Approve digital review"), ("pass", "Pass quality review")):
            p = sub.add_parser(name, help=help_text)
            p.add_argument("listing_id")
            p.add_argument("--note", default="")

        for name, help_text in (
            ("reject-digital", "Reject at digital review"),
            ("fail", "Reject at quality review"),
            ("revise", "Request a revision"),
        ):
            p = sub.add_parser(name, help=help_text)
            p.add_argument("listing_id")
            p.add_argument("--reason", required=True)

        sample = sub.add_parser("submit-sample", help="Submit a physical sample (seller)")
        sample.add_argument("listing_id")
        sample.add_argument("--method", required=True)
        sample.add_argument("--address", default="")
        sample.add_argument("--notes", default="")

    def handle(self, *args, **options):
        actor = Actor.seller(options["seller"]) if options.get("seller") else Actor.moderator(options["moderator"])
        materializer = container.materializer(actor)
        session = QAScreenSession(materializer)
        action = options["action"]

        async def run():
            await session.open()
            if action == "list":
                return None
            if action == "show":
                record = materializer.get(options["listing_id"])
                if record is None:
                    raise CommandError(f"No QA record visible for listing {options['listing_id']}")
                return record

            listing_id = options["listing_id"]
            if action == "approve":
                return await materializer.approve_for_sample(listing_id, note=options["note"])
            if action == "pass":
                return await materializer.pass_quality(listing_id, note=options["note"])
            if action == "reject-digital":
                return await materializer.reject_digital(listing_id, reason=options["reason"])
            if action == "fail":
                return await materializer.fail_quality(listing_id, reason=options["reason"])
            if action == "revise":
                return await materializer.request_revision(listing_id, reason=options["reason"])
            if action == "submit-sample":
                return await materializer.submit_sample(
                    listing_id, options["method"], address=options["address"], notes=options["notes"]
                )
            raise CommandError(f"Unknown action: {action}")

        try:
            record = async_to_sync(run)()
        except QAError as e:
            raise CommandError(f"{e.code}: {e.message}")

        if action == "list":
            self._write_buckets(materializer, options.get("bucket"))
        elif action == "show":
            self._write_record(record)
        else:
            self.stdout.write(self.style.SUCCESS(f"Listing {record.listing_id} is now {record.status}"))
            if materializer.stale:
                self.stdout.write(self.style.WARNING("Could not refresh the view; run 'list' again"))

    def _write_buckets(self, materializer, only=None):
        for name in BUCKET_NAMES:
            if only and name != only:
                continue
            records = materializer.buckets.bucket(name)
            self.stdout.write(self.style.MIGRATE_HEADING(f"{name} ({len(records)})"))
            for record in records:
                self.stdout.write(f"  {record.listing_id}  {record.listing_name}  seller={record.seller_id}")

    def _write_record(self, record):
        self.stdout.write(self.style.MIGRATE_HEADING(f"{record.listing_name} ({record.listing_id})"))
        for label, value in (
            ("status", record.status),
            ("approval", record.approval_status),
            ("seller", record.seller_id),
            ("logistics", record.logistics_method),
            ("rejection", record.rejection_reason and f"{record.rejection_stage}: {record.rejection_reason}"),
            ("revision", record.revision_reason and f"{record.revision_stage}: {record.revision_reason}"),
            ("submitted", record.submitted_at),
            ("updated", record.updated_at),
        ):
            if value:
                self.stdout.write(f"  {label:<10} {value}")
