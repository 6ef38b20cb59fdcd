"""
PERFORMANCE REPORT SHELF

Implements the class `ReportShelf` that encapsulates a Python shelf to store
the `PerformanceReport` objects of published window constructions on disk.
The classmethod `ReportShelf.add` can be passed as report sink to a
`ResultPublisher` or `BatchDriver`.

Notes
-----
Before adding reports on the shelf, the path to the shelf file must be
assigned to the class variable `path` of class `ReportShelf`.
"""
import shelve
import pandas as pd
from fenestra.logging import ModuleLogger

logger = ModuleLogger.get_logger(__name__)


class ReportShelf:
    path: str

    @classmethod
    def add(cls, *reports) -> None:
        """Adds a single or multiple `PerformanceReport` objects to the shelf.
        A report replaces any report with the same construction name.
        """
        with shelve.open(cls.path) as shelf:
            shelf.update({r.name: r for r in reports})
        logger.debug(f"Added {len(reports)} report(s) to shelf '{cls.path}'")

    @classmethod
    def load(cls, name: str):
        """Loads the report of the construction with the given name from the
        shelf. Raises a `KeyError` exception if the name cannot be found on the
        shelf.
        """
        with shelve.open(cls.path) as shelf:
            try:
                return shelf[name]
            except KeyError:
                raise KeyError(f"report '{name}' not found") from None

    @classmethod
    def overview(
        cls,
        detailed: bool = False,
        do_sort: bool = False
    ) -> list[str] | pd.DataFrame:
        """If parameter `detailed` is `False`, returns a list with the names of
        all reports on the shelf. Otherwise, returns a Pandas DataFrame with a
        row per report: status, achieved and target values, deltas,
        center-of-glass and edge-of-glass U-factor, and the layers of the
        construction.
        If `do_sort` is True, the names are sorted alphabetically.
        """
        with shelve.open(cls.path) as shelf:
            if do_sort:
                items = sorted(shelf.items(), key=lambda item: item[0].lower())
            else:
                items = list(shelf.items())
        if not detailed:
            return [name for name, _ in items]
        rows = [report.to_dict() for _, report in items]
        df = pd.DataFrame(rows)
        if not df.empty:
            df = df.set_index('name')
        return df

    @classmethod
    def delete(cls, *names: str) -> tuple[str, ...] | None:
        """Removes the reports with the given names from the shelf.
        If one or more names cannot be found, these names are returned,
        otherwise None is returned.
        """
        names_not_found = []
        with shelve.open(cls.path) as shelf:
            for name in names:
                try:
                    del shelf[name]
                except KeyError:
                    names_not_found.append(name)
        return tuple(names_not_found) or None

    @classmethod
    def export_to_excel(cls, file_path: str) -> None:
        """Exports the detailed overview of the shelf to an Excel file."""
        df = cls.overview(detailed=True)
        df.to_excel(file_path)
