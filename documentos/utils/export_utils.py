"""
Utilidades para exportación de reportes a CSV, Excel y PDF
AxiomaDocs
"""

import csv
from io import BytesIO, StringIO

from django.http import HttpResponse
from django.utils import timezone

# Excel
from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Alignment, Border, Side
from openpyxl.utils import get_column_letter

# PDF
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from reportlab.lib.enums import TA_CENTER
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer

COLOR_PRIMARIO = '2563EB'
COLOR_FILA_ALTERNA = 'F1F5F9'


def _borde(color='CBD5E1'):
    lado = Side(style='thin', color=color)
    return Border(left=lado, right=lado, top=lado, bottom=lado)


class ExcelExporter:
    """Exporta una tabla a Excel con encabezado y resumen"""

    extension = 'xlsx'

    def __init__(self, title="Reporte"):
        self.wb = Workbook()
        self.ws = self.wb.active
        self.ws.title = title[:31]  # Excel limita a 31 caracteres
        self.current_row = 1

    def add_title(self, title, subtitle=None):
        """Agrega título, subtítulo opcional y fecha de generación"""
        celda = self.ws.cell(row=self.current_row, column=1, value=title)
        celda.font = Font(size=16, bold=True, color=COLOR_PRIMARIO)
        self.current_row += 1

        if subtitle:
            celda = self.ws.cell(row=self.current_row, column=1, value=subtitle)
            celda.font = Font(size=12, color='64748B')
            self.current_row += 1

        generado = f"Generado: {timezone.localtime():%d/%m/%Y %H:%M}"
        celda = self.ws.cell(row=self.current_row, column=1, value=generado)
        celda.font = Font(size=10, italic=True, color='94A3B8')
        self.current_row += 2

    def add_headers(self, headers):
        for col_num, header in enumerate(headers, 1):
            cell = self.ws.cell(row=self.current_row, column=col_num, value=header)
            cell.font = Font(bold=True, color='FFFFFF')
            cell.fill = PatternFill(start_color=COLOR_PRIMARIO, end_color=COLOR_PRIMARIO, fill_type='solid')
            cell.alignment = Alignment(horizontal='center', vertical='center', wrap_text=True)
            cell.border = _borde('000000')
        self.current_row += 1

    def add_row(self, values, alternate=False):
        for col_num, value in enumerate(values, 1):
            cell = self.ws.cell(row=self.current_row, column=col_num, value=value)
            cell.alignment = Alignment(horizontal='left', vertical='center')
            cell.border = _borde()
            if alternate:
                cell.fill = PatternFill(start_color=COLOR_FILA_ALTERNA,
                                        end_color=COLOR_FILA_ALTERNA,
                                        fill_type='solid')
        self.current_row += 1

    def add_summary(self, summary_data):
        """Agrega pares etiqueta/valor al final de la hoja"""
        self.current_row += 1
        for label, value in summary_data.items():
            self.ws.cell(row=self.current_row, column=1, value=label).font = Font(bold=True)
            self.ws.cell(row=self.current_row, column=2, value=value).font = Font(color=COLOR_PRIMARIO)
            self.current_row += 1

    def auto_adjust_columns(self):
        for column_cells in self.ws.columns:
            length = max(len(str(cell.value or '')) for cell in column_cells)
            self.ws.column_dimensions[get_column_letter(column_cells[0].column)].width = min(length + 2, 50)

    def get_response(self, filename="reporte.xlsx"):
        self.auto_adjust_columns()

        output = BytesIO()
        self.wb.save(output)

        response = HttpResponse(
            output.getvalue(),
            content_type='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
        )
        response['Content-Disposition'] = f'attachment; filename="{filename}"'
        return response


class PDFExporter:
    """Exporta una tabla a PDF con encabezado y resumen"""

    extension = 'pdf'

    def __init__(self, title="Reporte", orientation="landscape"):
        self.title = title
        self.orientation = orientation
        self.elements = []
        self.headers = []
        self.rows = []
        self.styles = getSampleStyleSheet()

        self.styles.add(ParagraphStyle(
            name='TituloReporte',
            parent=self.styles['Heading1'],
            fontSize=18,
            textColor=colors.HexColor(f'#{COLOR_PRIMARIO}'),
            spaceAfter=12,
            alignment=TA_CENTER
        ))
        self.styles.add(ParagraphStyle(
            name='SubtituloReporte',
            parent=self.styles['Normal'],
            fontSize=12,
            textColor=colors.grey,
            spaceAfter=6,
            alignment=TA_CENTER
        ))
        self.styles.add(ParagraphStyle(
            name='PieReporte',
            parent=self.styles['Normal'],
            fontSize=8,
            textColor=colors.grey,
            alignment=TA_CENTER
        ))

    def add_title(self, title, subtitle=None):
        self.elements.append(Paragraph(title, self.styles['TituloReporte']))
        if subtitle:
            self.elements.append(Paragraph(subtitle, self.styles['SubtituloReporte']))

        fecha = timezone.localtime().strftime('%d/%m/%Y %H:%M')
        self.elements.append(Paragraph(f"Generado: {fecha}", self.styles['PieReporte']))
        self.elements.append(Spacer(1, 0.3 * inch))

    def add_headers(self, headers):
        self._flush_table()
        self.headers = list(headers)

    def add_row(self, values, alternate=False):
        self.rows.append(['' if v is None else str(v) for v in values])

    def _flush_table(self):
        """Vuelca la tabla acumulada (encabezados + filas) a los elementos del PDF"""
        if not self.headers:
            return

        table = Table([self.headers] + self.rows, repeatRows=1)
        table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor(f'#{COLOR_PRIMARIO}')),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
            ('ALIGN', (0, 0), (-1, 0), 'CENTER'),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (-1, 0), 9),
            ('BOTTOMPADDING', (0, 0), (-1, 0), 10),

            ('FONTNAME', (0, 1), (-1, -1), 'Helvetica'),
            ('FONTSIZE', (0, 1), (-1, -1), 8),
            ('TOPPADDING', (0, 1), (-1, -1), 4),
            ('BOTTOMPADDING', (0, 1), (-1, -1), 4),

            ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
            ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, colors.HexColor(f'#{COLOR_FILA_ALTERNA}')])
        ]))
        self.elements.append(table)
        self.elements.append(Spacer(1, 0.2 * inch))
        self.headers = []
        self.rows = []

    def add_summary(self, summary_data):
        self._flush_table()
        self.elements.append(Paragraph("<b>RESUMEN</b>", self.styles['Heading2']))

        summary_table = Table([[k, str(v)] for k, v in summary_data.items()], colWidths=[3 * inch, 2 * inch])
        summary_table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (0, -1), colors.HexColor('#F1F5F9')),
            ('ALIGN', (0, 0), (0, -1), 'RIGHT'),
            ('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (-1, -1), 9),
            ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
        ]))
        self.elements.append(summary_table)

    def get_response(self, filename="reporte.pdf"):
        self._flush_table()
        buffer = BytesIO()

        pagesize = landscape(A4) if self.orientation == "landscape" else A4
        doc = SimpleDocTemplate(
            buffer,
            pagesize=pagesize,
            title=self.title,
            rightMargin=0.5 * inch,
            leftMargin=0.5 * inch,
            topMargin=0.5 * inch,
            bottomMargin=0.5 * inch
        )
        doc.build(self.elements)

        response = HttpResponse(buffer.getvalue(), content_type='application/pdf')
        response['Content-Disposition'] = f'attachment; filename="{filename}"'
        return response


class CSVExporter:
    """Exporta una tabla a CSV (separador ';' para Excel en español)"""

    extension = 'csv'

    def __init__(self, title="Reporte"):
        self.title = title
        self.buffer = StringIO()
        self.writer = csv.writer(self.buffer, delimiter=';')

    def add_title(self, title, subtitle=None):
        self.writer.writerow([title])
        if subtitle:
            self.writer.writerow([subtitle])
        self.writer.writerow([])

    def add_headers(self, headers):
        self.writer.writerow(headers)

    def add_row(self, values, alternate=False):
        self.writer.writerow(['' if v is None else v for v in values])

    def add_summary(self, summary_data):
        self.writer.writerow([])
        for label, value in summary_data.items():
            self.writer.writerow([label, value])

    def get_response(self, filename="reporte.csv"):
        # BOM para que Excel reconozca UTF-8
        response = HttpResponse('﻿' + self.buffer.getvalue(), content_type='text/csv; charset=utf-8')
        response['Content-Disposition'] = f'attachment; filename="{filename}"'
        return response


EXPORTADORES = {
    'csv': CSVExporter,
    'excel': ExcelExporter,
    'pdf': PDFExporter,
}


def get_exporter(formato, title):
    """Retorna el exportador para el formato pedido, o None si no existe."""
    clase = EXPORTADORES.get((formato or '').lower())
    return clase(title=title) if clase else None


# Funciones auxiliares para formateo
def format_boolean(value):
    return "Sí" if value else "No"
