import logging
from pathlib import Path
from typing import List, Optional

from tqdm import tqdm

from .exceptions import TimestampUnavailable, RenamerError, FileOperationError
from .metadata.probe import MetadataProbe
from .metadata.timestamps import TimestampResolver, apply_shift
from .models import FileOutcome, RenameOptions, SourceEntry, TriageDecision
from .naming.builder import build_filename
from .naming.classifier import classify
from .organization.mover import FileMover
from .scanning.filesystem import list_entries, triage


class CaptureRenamerApp:
    def __init__(self, probe: Optional[MetadataProbe] = None):
        self.probe = probe or MetadataProbe()
        self.resolver = TimestampResolver(self.probe)

    def run(self, root: Path, options: RenameOptions, show_progress: bool = False) -> List[FileOutcome]:
        """
        Renames every file directly inside root.
        1. Triage (delete sidecars / skip hidden / process)
        2. Resolve capture time and apply the configured shift
        3. Classify the original name and build the canonical name
        4. Move, redirecting into duplicates/ on collision

        A failure on one file is logged and the batch carries on.
        """
        root = Path(root).absolute()
        mover = FileMover(root, dry_run=options.dry_run)
        entries = list_entries(root)

        logging.info(
            f"Renaming {len(entries)} files in {root} "
            f"(Source={options.timestamp_source.value}, Shift={options.shift}, DryRun={options.dry_run})..."
        )

        outcomes = []
        for entry in tqdm(entries, desc="Renaming", disable=not show_progress):
            outcomes.append(self._handle_entry(entry, options, mover))

        counts = {}
        for o in outcomes:
            counts[o.action] = counts.get(o.action, 0) + 1
        logging.info(f"Batch complete{mover.marker}: {counts}")
        return outcomes

    def _handle_entry(self, entry: SourceEntry, options: RenameOptions, mover: FileMover) -> FileOutcome:
        decision = triage(entry)
        outcome = FileOutcome(source=entry.path, decision=decision, action="failed", dry_run=options.dry_run)

        try:
            if decision is TriageDecision.DELETE:
                mover.delete(entry)
                outcome.action = "deleted"
            elif decision is TriageDecision.SKIP:
                logging.info(f"Skipping {entry.path}.")
                outcome.action = "skipped"
            else:
                logging.info(f"Processing {entry.path}, filename: {entry.name}, ext: {entry.ext}")
                self._log_media_info(entry)
                self._process(entry, options, mover, outcome)
        except TimestampUnavailable as e:
            logging.warning(f"No capture time for {entry.path}, leaving it in place: {e}")
            outcome.reason = str(e)
        except RenamerError as e:
            logging.error(f"Failed on {entry.path}: {e}")
            outcome.reason = str(e)
        except Exception as e:
            logging.exception(f"Unexpected failure on {entry.path}")
            outcome.reason = f"{type(e).__name__}: {e}"

        return outcome

    def _process(self, entry: SourceEntry, options: RenameOptions, mover: FileMover, outcome: FileOutcome):
        dt = self.resolver.resolve(entry, options.timestamp_source)
        shifted = apply_shift(dt, options.shift)
        outcome.capture_datetime = dt
        outcome.shifted_datetime = shifted

        logging.info(
            f"File: {entry.path}, sourceTime({options.timestamp_source.value}): {dt}, shiftedTime: {shifted}"
        )

        classification = classify(entry.name)
        outcome.convention = classification.convention
        logging.debug(
            f"{entry.name}: {classification.convention.value} (rule {classification.rule}), suffix {classification.suffix}"
        )
        target_name = build_filename(shifted, classification.suffix, options.custom_tag, entry.ext)

        plan = mover.place(entry, target_name)
        outcome.target = plan.target_path
        outcome.is_fallback = plan.is_fallback
        if plan.target_path == entry.path:
            outcome.action = "unchanged"
        elif plan.is_fallback:
            outcome.action = "fallback"
        else:
            outcome.action = "renamed"

        # Written onto the final path; a failed move never gets here
        if options.set_mtime:
            try:
                mover.set_mtime(plan.target_path, shifted)
            except FileOperationError as e:
                logging.warning(str(e))
                outcome.reason = str(e)

    def _log_media_info(self, entry: SourceEntry):
        if not logging.getLogger().isEnabledFor(logging.DEBUG):
            return
        try:
            logging.debug(self.probe.describe(entry.path))
        except Exception as e:
            logging.warning(f"No media information for {entry.path}: {e}")
