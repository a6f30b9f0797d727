"""
Reporting and Export Module for Shift Board

Exports the shift roster, availability, time-off requests and shift trades
to PDF, Excel and CSV, and builds a plain-text summary for a week.
"""

import pandas as pd
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer, PageBreak
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from datetime import datetime, date
from pathlib import Path
from typing import Dict, List, Optional, Union
from xml.sax.saxutils import escape
import logging

from .data_manager import DataManager, Shift, Weekday, TimeOffStatus, as_date
from .request_logic import TimeOffManager, ShiftTradeManager

logger = logging.getLogger(__name__)


class ReportGenerator:
    """Builds the individual report files"""

    SHIFT_COLUMNS = ['ID', 'Date', 'Day', 'Time', 'Employee', 'Position', 'Section']

    def __init__(self, data_manager: DataManager, time_off: TimeOffManager,
                 trades: ShiftTradeManager):
        self.data_manager = data_manager
        self.time_off = time_off
        self.trades = trades
        self.styles = getSampleStyleSheet()
        self._setup_custom_styles()

    def _setup_custom_styles(self):
        """Setup custom report styles"""
        self.styles.add(ParagraphStyle(
            name='RosterTitle',
            parent=self.styles['Heading1'],
            fontSize=18,
            spaceAfter=20,
            alignment=1  # Center alignment
        ))

        self.styles.add(ParagraphStyle(
            name='RosterHeading',
            parent=self.styles['Heading2'],
            fontSize=14,
            spaceAfter=12
        ))

    def export_week_pdf(self, reference_day: Union[date, datetime], output_path: str,
                        highlight_user: Optional[str] = None) -> bool:
        """Export the weekly roster and the time-off requests to PDF"""
        try:
            doc = SimpleDocTemplate(
                output_path,
                pagesize=landscape(A4),
                rightMargin=0.5*inch,
                leftMargin=0.5*inch,
                topMargin=0.5*inch,
                bottomMargin=0.5*inch
            )

            week = self.data_manager.shifts.week_of(reference_day)
            start, end = week[0][0], week[-1][0]

            story = []
            title = Paragraph(
                f"Shift Roster - {start.strftime('%b %d')} to {end.strftime('%b %d, %Y')}",
                self.styles['RosterTitle']
            )
            story.append(title)
            story.append(Spacer(1, 20))

            story.append(self._create_week_table(week, highlight_user))

            story.append(PageBreak())
            story.append(Paragraph("Time Off Requests", self.styles['RosterHeading']))
            story.append(self._create_time_off_table())

            doc.build(story)
            return True

        except Exception as e:
            logger.error(f"Error creating PDF: {e}", exc_info=True)
            return False

    def _create_week_table(self, week, highlight_user: Optional[str] = None) -> Table:
        """Create the seven-column roster table for PDF"""
        header = [f"{Weekday.from_date(day).short_name} {day.day}" for day, _ in week]
        row = [self._format_day_cell(shifts, highlight_user) for _, shifts in week]

        table = Table([header, row], colWidths=[1.5*inch]*7)
        table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, 0), colors.grey),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
            ('ALIGN', (0, 0), (-1, 0), 'CENTER'),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (-1, 0), 10),
            ('BOTTOMPADDING', (0, 0), (-1, 0), 12),
            ('BACKGROUND', (0, 1), (-1, -1), colors.beige),
            ('GRID', (0, 0), (-1, -1), 1, colors.black),
            ('VALIGN', (0, 0), (-1, -1), 'TOP'),
        ]))
        return table

    def _format_day_cell(self, shifts: List[Shift], highlight_user: Optional[str] = None):
        """Format individual roster cell content"""
        if not shifts:
            return Paragraph("No Shifts", self.styles['Normal'])

        lines = []
        for shift in shifts:
            name = escape(shift.employee_name)
            if self.data_manager.shifts.is_own_shift(shift, highlight_user):
                name = f"<b>{name}</b>"
            lines.append(
                f"{escape(shift.time)}<br/>{name} &bull; {escape(shift.position)} &bull; {escape(shift.section)}"
            )
        return Paragraph("<br/><br/>".join(lines), self.styles['Normal'])

    def _create_time_off_table(self) -> Table:
        data = [['Employee', 'From', 'To', 'Days', 'Status']]
        for request in self.time_off.list_requests():
            data.append([
                request.employee_name,
                request.start_date.isoformat(),
                request.end_date.isoformat(),
                str(request.days),
                request.status.value
            ])

        table = Table(data, colWidths=[2.5*inch, 1.3*inch, 1.3*inch, 0.8*inch, 1.2*inch])
        style = [
            ('BACKGROUND', (0, 0), (-1, 0), colors.lightgrey),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('ALIGN', (0, 0), (-1, -1), 'LEFT'),
            ('FONTSIZE', (0, 0), (-1, -1), 10),
            ('GRID', (0, 0), (-1, -1), 1, colors.black),
        ]
        status_colors = {
            TimeOffStatus.PENDING.value: colors.orange,
            TimeOffStatus.APPROVED.value: colors.green,
            TimeOffStatus.DENIED.value: colors.red,
        }
        for row_idx, row in enumerate(data[1:], start=1):
            style.append(('TEXTCOLOR', (4, row_idx), (4, row_idx), status_colors[row[4]]))
        table.setStyle(TableStyle(style))
        return table

    def export_roster_excel(self, output_path: str) -> bool:
        """Export shifts, availability, time off and trades to Excel"""
        try:
            with pd.ExcelWriter(output_path, engine='openpyxl') as writer:
                self._create_shift_dataframe().to_excel(writer, sheet_name='Shifts', index=False)
                self._create_availability_dataframe().to_excel(writer, sheet_name='Availability', index=False)
                self._create_time_off_dataframe().to_excel(writer, sheet_name='TimeOff', index=False)
                self._create_trade_dataframe().to_excel(writer, sheet_name='Trades', index=False)

                self._format_excel_worksheets(writer)

            return True

        except Exception as e:
            logger.error(f"Error exporting to Excel: {e}", exc_info=True)
            return False

    def export_roster_csv(self, output_path: str) -> bool:
        """Export the shift roster to CSV format"""
        try:
            self._create_shift_dataframe().to_csv(output_path, index=False)
            return True

        except Exception as e:
            logger.error(f"Error exporting to CSV: {e}", exc_info=True)
            return False

    def _create_shift_dataframe(self) -> pd.DataFrame:
        """Create shift DataFrame, sorted by date then creation order"""
        data = []
        for shift in self.data_manager.shifts:
            data.append({
                'ID': shift.id,
                'Date': shift.date.isoformat(),
                'Day': shift.date.strftime("%A"),
                'Time': shift.time,
                'Employee': shift.employee_name,
                'Position': shift.position,
                'Section': shift.section
            })

        df = pd.DataFrame(data, columns=self.SHIFT_COLUMNS)
        return df.sort_values(['Date', 'ID']).reset_index(drop=True)

    def _create_availability_dataframe(self) -> pd.DataFrame:
        columns = ['Employee'] + [day.short_name for day in Weekday]
        data = []
        for entry in self.data_manager.availability.list_all():
            row = {'Employee': entry.employee_name}
            for day in Weekday:
                row[day.short_name] = entry.for_day(day)
            data.append(row)
        return pd.DataFrame(data, columns=columns)

    def _create_time_off_dataframe(self) -> pd.DataFrame:
        columns = ['ID', 'Employee', 'Start_Date', 'End_Date', 'Days', 'Status']
        data = []
        for request in self.time_off.list_requests():
            data.append({
                'ID': request.id,
                'Employee': request.employee_name,
                'Start_Date': request.start_date.isoformat(),
                'End_Date': request.end_date.isoformat(),
                'Days': request.days,
                'Status': request.status.value
            })
        return pd.DataFrame(data, columns=columns)

    def _create_trade_dataframe(self) -> pd.DataFrame:
        """Pending offers first, then accepted trades"""
        columns = ['Trade_ID', 'Requested_By', 'Shift_Date', 'Shift_Time',
                   'Position', 'Section', 'Status', 'Covered_By']
        data = []
        for trade in self.trades.pending_trades() + self.trades.accepted_trades():
            data.append({
                'Trade_ID': trade.id,
                'Requested_By': trade.employee_name,
                'Shift_Date': trade.shift.date.isoformat(),
                'Shift_Time': trade.shift.time,
                'Position': trade.shift.position,
                'Section': trade.shift.section,
                'Status': trade.status.value,
                'Covered_By': trade.cover_employee or ''
            })
        return pd.DataFrame(data, columns=columns)

    def _format_excel_worksheets(self, writer):
        """Header colours and column widths for every sheet"""
        from openpyxl.styles import PatternFill, Font

        header_fill = PatternFill(start_color="366092", end_color="366092", fill_type="solid")
        header_font = Font(color="FFFFFF", bold=True)

        for worksheet in writer.sheets.values():
            for cell in worksheet[1]:
                cell.fill = header_fill
                cell.font = header_font

            for column in worksheet.columns:
                max_length = max((len(str(cell.value)) for cell in column if cell.value is not None), default=0)
                worksheet.column_dimensions[column[0].column_letter].width = min(max_length + 2, 50)

    def create_week_summary(self, reference_day: Union[date, datetime]) -> str:
        """Create text summary of a week for a manager dashboard"""
        week = self.data_manager.shifts.week_of(reference_day)
        start, end = week[0][0], week[-1][0]
        total_shifts = sum(len(shifts) for _, shifts in week)
        staff = sorted({s.employee_name for _, shifts in week for s in shifts})

        day_lines = []
        for day, shifts in week:
            count = len(shifts)
            label = "No Shifts" if count == 0 else f"{count} Shift{'s' if count > 1 else ''}"
            day_lines.append(f"• {Weekday.from_date(day).short_name} {day.day}: {label}")

        overlapping = [
            r for r in self.time_off.list_requests()
            if r.status is not TimeOffStatus.DENIED and r.start_date <= end and r.end_date >= start
        ]

        summary = f"""
WEEK SUMMARY - {start.isoformat()} to {end.isoformat()}

Shifts:
• Total Shifts: {total_shifts}
• Employees Scheduled: {len(staff)}
{chr(10).join(day_lines)}

Requests:
• Pending Time Off: {len(self.time_off.pending_requests())}
• Time Off This Week: {len(overlapping)}
• Open Trade Offers: {len(self.trades.pending_trades())}
• Covered Trades: {len(self.trades.accepted_trades())}

Availability Submitted: {len(self.data_manager.availability)}
        """

        if overlapping:
            summary += "\n\nTIME OFF THIS WEEK:"
            for request in overlapping:
                summary += (f"\n• {request.employee_name}: {request.start_date.isoformat()} to "
                            f"{request.end_date.isoformat()} ({request.status.value})")

        return summary.strip()


class ExportManager:
    """Manager class for handling all export operations"""

    FORMATS = ('pdf', 'excel', 'csv')
    EXTENSIONS = {'pdf': 'pdf', 'excel': 'xlsx', 'csv': 'csv'}

    def __init__(self, data_manager: DataManager, time_off: TimeOffManager,
                 trades: ShiftTradeManager):
        self.data_manager = data_manager
        self.report_generator = ReportGenerator(data_manager, time_off, trades)

    def export_roster(self, format_type: str, output_path: str,
                      reference_day: Optional[Union[date, datetime]] = None,
                      highlight_user: Optional[str] = None) -> bool:
        """Export in the given format; PDF covers the week of reference_day"""
        format_type = format_type.lower()
        if format_type == 'pdf':
            day = as_date(reference_day) if reference_day else date.today()
            return self.report_generator.export_week_pdf(day, output_path, highlight_user)
        elif format_type == 'excel':
            return self.report_generator.export_roster_excel(output_path)
        elif format_type == 'csv':
            return self.report_generator.export_roster_csv(output_path)
        else:
            raise ValueError(f"Unsupported format: {format_type}")

    def get_default_filename(self, reference_day: Union[date, datetime], format_type: str) -> str:
        """Generate default filename for export"""
        week_start = self.data_manager.shifts.start_of_week(reference_day)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        extension = self.EXTENSIONS.get(format_type.lower(), format_type.lower())
        return f"shift_roster_{week_start.isoformat()}_{timestamp}.{extension}"

    def batch_export(self, reference_day: Union[date, datetime], output_dir: Optional[str] = None,
                     formats: Optional[List[str]] = None) -> Dict[str, bool]:
        """Export the roster in multiple formats"""
        if formats is None:
            formats = list(self.FORMATS)
        if output_dir is None:
            output_dir = self.data_manager.get_setting("exportDir")

        results = {}
        output_path = Path(output_dir)
        output_path.mkdir(parents=True, exist_ok=True)

        for format_type in formats:
            file_path = output_path / self.get_default_filename(reference_day, format_type)
            try:
                results[format_type] = self.export_roster(format_type, str(file_path), reference_day)
            except ValueError as e:
                logger.error(f"Error exporting {format_type}: {e}", exc_info=True)
                results[format_type] = False

        return results
