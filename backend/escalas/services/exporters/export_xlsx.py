from __future__ import annotations

from collections import defaultdict
from typing import Dict, Iterable, List, Tuple

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font
from openpyxl.utils import get_column_letter

from escalas.domain.models import SchedulePeriod
from escalas.domain.repositories import AreaRepository, EventRepository

# =========================
# Utilidades
# =========================

def _autosize_columns(ws, max_width: int = 60):
    """Ajusta a largura das colunas com base no conteúdo.

    Args:
        ws (Worksheet): A planilha do Excel.
        max_width (int, optional): A largura máxima da coluna. Defaults to 60.
    """
    for col_idx, column_cells in enumerate(ws.columns, start=1):
        length = 0
        for cell in column_cells:
            v = "" if cell.value is None else str(cell.value)
            length = max(length, len(v))
        ws.column_dimensions[get_column_letter(col_idx)].width = min(max(10, length + 2), max_width)

def _header(ws, labels: Iterable[str]):
    """Escreve o cabeçalho (negrito, centralizado, congelado)."""
    ws.append(list(labels))
    for cell in ws[1]:
        cell.font = Font(bold=True)
        cell.alignment = Alignment(horizontal="center")
    ws.freeze_panes = "A2"

def period_filename(period: SchedulePeriod, ext: str) -> str:
    return f"escala-{period.ministry_id}-{period.year}-{period.month:02d}.{ext}"

# =========================
# Export principal
# =========================

def export_period_xlsx(period: SchedulePeriod, out_path: str) -> str:
    """Exporta a escala do período para XLSX.

    A primeira aba traz uma linha por evento e uma coluna por área; a
    segunda, quantas vezes e em quais datas cada servo foi escalado.

    Args:
        period (SchedulePeriod): O período a exportar.
        out_path (str): Caminho do arquivo de saída.

    Returns:
        str: O caminho do arquivo gerado.
    """
    wb = Workbook()
    areas = list(AreaRepository.actives_for_ministry(period.ministry))
    events = list(
        EventRepository.for_period(period)
        .prefetch_related("assignments__servant", "assignments__area")
    )

    ws = wb.active
    ws.title = f"Escala {period.year}-{period.month:02d}"
    _header(ws, ["Data", "Hora", "Evento", *[a.name for a in areas]])

    per_servant: Dict[str, List[Tuple]] = defaultdict(list)
    for e in events:
        by_area = {a.area_id: a for a in e.assignments.all()}
        row = ws.max_row + 1
        c_data = ws.cell(row=row, column=1, value=e.event_date)
        c_time = ws.cell(row=row, column=2, value=e.event_time)
        ws.cell(row=row, column=3, value=e.title)
        for idx, area in enumerate(areas, start=4):
            a = by_area.get(area.id)
            ws.cell(row=row, column=idx, value=a.servant.name if a else "")
        for a in e.assignments.all():
            per_servant[a.servant.name].append((e.event_date, a.area.name))

        c_data.number_format = "DD/MM/YYYY"
        c_time.number_format = "HH:MM"
        c_data.alignment = Alignment(horizontal="center")
        c_time.alignment = Alignment(horizontal="center")
    _autosize_columns(ws)

    ws2 = wb.create_sheet(title="Servos (Resumo)")
    _header(ws2, ["Servo", "Qtd.", "Datas"])
    for name in sorted(per_servant):
        items = sorted(per_servant[name])
        dates = ", ".join(f"{d:%d/%m} ({area})" for d, area in items)
        ws2.append([name, len(items), dates])
    _autosize_columns(ws2)

    wb.save(out_path)
    return out_path
