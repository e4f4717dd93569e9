# apps/informes/pdf.py

"""
Utilidades de maquetación PDF sobre el canvas de reportlab

Cada función dibuja un bloque a partir de una posición vertical `y`
(en mm, medida desde el borde superior de la página) y devuelve la
posición libre siguiente. Los saltos de página son manuales: antes de
un bloque grande se llama a verificar_salto_pagina().
"""

from datetime import date, datetime
from io import BytesIO

from django.utils import timezone
from reportlab.lib.colors import HexColor, white
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas


# Colores institucionales
PDF_COLORS = {
    'PRIMARY': '#004272',
    'SECONDARY': '#018CD1',
    'ACCENT': '#1A5581',
    'TEXT': '#333333',
    'TEXT_LIGHT': '#666666',
    'BORDER': '#CCCCCC',
    'ROW_ALT': '#F5F5F5',
    'SUCCESS': '#006B1A',
    'WARNING': '#A67C00',
    'DANGER': '#A90000',
}

PDF_FONTS = {
    'TITLE': 16,
    'SUBTITLE': 14,
    'HEADING': 12,
    'BODY': 10,
    'SMALL': 8,
    'TINY': 7,
}

# Márgenes en mm
PDF_MARGINS = {
    'TOP': 20,
    'BOTTOM': 20,
    'LEFT': 15,
    'RIGHT': 15,
}

FUENTE = 'Helvetica'
FUENTE_NEGRITA = 'Helvetica-Bold'

TEXTO_PIE = 'INEI - Sistema Integral de Gestion de Proyectos (SIGP)'

MESES = [
    'enero', 'febrero', 'marzo', 'abril', 'mayo', 'junio',
    'julio', 'agosto', 'septiembre', 'octubre', 'noviembre', 'diciembre',
]


def color(hex_color):
    return HexColor(PDF_COLORS.get(hex_color, hex_color))


class DocumentoPDF:
    """
    Documento A4 en construcción

    Guarda el canvas, el número de página actual y el tamaño de página
    en mm. Las coordenadas que recibe se miden desde arriba.
    """

    def __init__(self, titulo, pagesize=A4):
        self.buffer = BytesIO()
        self.canvas = canvas.Canvas(self.buffer, pagesize=pagesize)
        self.canvas.setTitle(titulo)
        self.canvas.setSubject('SIGP - Sistema Integral de Gestion de Proyectos')
        self.canvas.setAuthor('INEI')
        self.canvas.setCreator('SIGP')
        self.pagina = 1
        self.ancho = pagesize[0] / mm
        self.alto = pagesize[1] / mm

    @property
    def ancho_util(self):
        return self.ancho - PDF_MARGINS['LEFT'] - PDF_MARGINS['RIGHT']

    def py(self, y):
        """Convierte y (mm desde arriba) a puntos desde abajo"""
        return (self.alto - y) * mm

    # === Primitivas de dibujo ===

    def texto(self, x, y, contenido, size=None, fuente=FUENTE, fill='TEXT', align='left'):
        c = self.canvas
        c.setFont(fuente, size or PDF_FONTS['BODY'])
        c.setFillColor(color(fill) if isinstance(fill, str) else fill)
        if align == 'center':
            c.drawCentredString(x * mm, self.py(y), contenido)
        elif align == 'right':
            c.drawRightString(x * mm, self.py(y), contenido)
        else:
            c.drawString(x * mm, self.py(y), contenido)

    def rect(self, x, y, ancho, alto, fill=None, stroke=None, radio=0, grosor=0.1):
        c = self.canvas
        if fill:
            c.setFillColor(color(fill))
        if stroke:
            c.setStrokeColor(color(stroke))
            c.setLineWidth(grosor * mm)
        bottom = self.py(y + alto)
        if radio:
            c.roundRect(x * mm, bottom, ancho * mm, alto * mm, radio * mm,
                        stroke=1 if stroke else 0, fill=1 if fill else 0)
        else:
            c.rect(x * mm, bottom, ancho * mm, alto * mm,
                   stroke=1 if stroke else 0, fill=1 if fill else 0)

    def linea(self, x1, y1, x2, y2, stroke='BORDER', grosor=0.3):
        c = self.canvas
        c.setStrokeColor(color(stroke))
        c.setLineWidth(grosor * mm)
        c.line(x1 * mm, self.py(y1), x2 * mm, self.py(y2))

    def nueva_pagina(self):
        self.canvas.showPage()
        self.pagina += 1

    def cerrar(self) -> bytes:
        """Agrega el pie a la última página y devuelve el PDF"""
        agregar_pie(self)
        self.canvas.save()
        return self.buffer.getvalue()


def ancho_texto(contenido, size, fuente=FUENTE):
    """Ancho del texto en mm"""
    return stringWidth(contenido, fuente, size) / mm


def truncar_texto(contenido, ancho_max, size=PDF_FONTS['SMALL'], fuente=FUENTE):
    """Recorta el texto para que quepa en ancho_max (mm), terminando en '...'"""
    if ancho_texto(contenido, size, fuente) <= ancho_max:
        return contenido

    recortado = contenido
    while recortado and ancho_texto(recortado + '...', size, fuente) > ancho_max:
        recortado = recortado[:-1]

    return recortado.rstrip() + '...'


# === Bloques de maquetación ===

def agregar_encabezado(doc: DocumentoPDF, titulo, subtitulo=None, generado=None):
    """Banda azul con título, subtítulo y fecha de generación. Devuelve y=40"""
    doc.rect(0, 0, doc.ancho, 35, fill='PRIMARY')

    doc.texto(doc.ancho / 2, 15, titulo.upper(), size=PDF_FONTS['TITLE'],
              fuente=FUENTE_NEGRITA, fill=white, align='center')

    if subtitulo:
        doc.texto(doc.ancho / 2, 23, subtitulo, size=PDF_FONTS['BODY'], fill=white, align='center')

    doc.linea(PDF_MARGINS['LEFT'], 30, doc.ancho - PDF_MARGINS['RIGHT'], 30, stroke='SECONDARY', grosor=0.5)

    generado = generado or timezone.localtime()
    doc.texto(doc.ancho - PDF_MARGINS['RIGHT'], 7, f"Generado: {generado.strftime('%d/%m/%Y %H:%M')}",
              size=PDF_FONTS['TINY'], fill=white, align='right')

    return 40


def agregar_pie(doc: DocumentoPDF):
    y_linea = doc.alto - 15
    doc.linea(PDF_MARGINS['LEFT'], y_linea, doc.ancho - PDF_MARGINS['RIGHT'], y_linea)
    doc.texto(PDF_MARGINS['LEFT'], doc.alto - 10, TEXTO_PIE, size=PDF_FONTS['TINY'], fill='TEXT_LIGHT')
    doc.texto(doc.ancho - PDF_MARGINS['RIGHT'], doc.alto - 10, f'Pagina {doc.pagina}',
              size=PDF_FONTS['TINY'], fill='TEXT_LIGHT', align='right')


def verificar_salto_pagina(doc: DocumentoPDF, y, requerido):
    """
    Si no quedan `requerido` mm antes del margen inferior, cierra la página
    con su pie y devuelve la y inicial de la siguiente
    """
    disponible = doc.alto - PDF_MARGINS['BOTTOM'] - y
    if disponible < requerido:
        agregar_pie(doc)
        doc.nueva_pagina()
        return PDF_MARGINS['TOP'] + 10
    return y


def agregar_seccion(doc: DocumentoPDF, titulo, y, subrayado=True, fill='PRIMARY'):
    doc.texto(PDF_MARGINS['LEFT'], y, titulo, size=PDF_FONTS['HEADING'], fuente=FUENTE_NEGRITA, fill=fill)

    if subrayado:
        ancho = ancho_texto(titulo, PDF_FONTS['HEADING'], FUENTE_NEGRITA)
        doc.linea(PDF_MARGINS['LEFT'], y + 1, PDF_MARGINS['LEFT'] + ancho, y + 1, stroke='SECONDARY', grosor=0.5)

    return y + 8


def agregar_parrafo(doc: DocumentoPDF, contenido, y, ancho_max=None, size=None, negrita=False, fill='TEXT'):
    """Texto con ajuste de línea; cada línea ocupa size * 0.5 mm"""
    size = size or PDF_FONTS['BODY']
    fuente = FUENTE_NEGRITA if negrita else FUENTE
    ancho_max = ancho_max or doc.ancho_util

    lineas = simpleSplit(contenido, fuente, size, ancho_max * mm) or ['']
    alto_linea = size * 0.5
    for linea in lineas:
        y = verificar_salto_pagina(doc, y, alto_linea)
        doc.texto(PDF_MARGINS['LEFT'], y, linea, size=size, fuente=fuente, fill=fill)
        y += alto_linea

    return y + 4


def agregar_lista(doc: DocumentoPDF, items, y, vineta='•', sangria=5):
    for item in items:
        y = verificar_salto_pagina(doc, y, 6)
        doc.texto(PDF_MARGINS['LEFT'], y, vineta)
        doc.texto(PDF_MARGINS['LEFT'] + sangria, y,
                  truncar_texto(item, doc.ancho_util - sangria, PDF_FONTS['BODY']))
        y += 6
    return y


def agregar_tabla(doc: DocumentoPDF, filas, encabezados, y, anchos=None, fill_encabezado='PRIMARY',
                  filas_alternas=True):
    """
    Tabla con fila de encabezado, bordes por fila y celdas truncadas

    Si la tabla no cabe, continúa en la página siguiente repitiendo
    el encabezado.
    """
    ancho_tabla = doc.ancho_util
    anchos = anchos or [ancho_tabla / len(encabezados)] * len(encabezados)
    alto_fila = 8
    padding = 2
    x0 = PDF_MARGINS['LEFT']

    def dibujar_encabezado(y):
        doc.rect(x0, y, ancho_tabla, alto_fila, fill=fill_encabezado)
        x = x0
        for encabezado, ancho in zip(encabezados, anchos):
            doc.texto(x + padding, y + 5.5,
                      truncar_texto(encabezado, ancho - padding * 2, PDF_FONTS['SMALL'], FUENTE_NEGRITA),
                      size=PDF_FONTS['SMALL'], fuente=FUENTE_NEGRITA, fill=white)
            x += ancho
        return y + alto_fila

    y = dibujar_encabezado(y)

    for i, fila in enumerate(filas):
        y_nueva = verificar_salto_pagina(doc, y, alto_fila)
        if y_nueva != y:
            y = dibujar_encabezado(y_nueva)

        if filas_alternas and i % 2 == 1:
            doc.rect(x0, y, ancho_tabla, alto_fila, fill='ROW_ALT')
        doc.rect(x0, y, ancho_tabla, alto_fila, stroke='BORDER')

        x = x0
        for celda, ancho in zip(fila, anchos):
            contenido = truncar_texto(str(celda if celda is not None else ''), ancho - padding * 2)
            doc.texto(x + padding, y + 5.5, contenido, size=PDF_FONTS['SMALL'])
            x += ancho

        y += alto_fila

    return y


def agregar_caja_info(doc: DocumentoPDF, etiqueta, valor, y, ancho=60, x=None):
    x = PDF_MARGINS['LEFT'] if x is None else x
    alto = 12
    doc.rect(x, y, ancho, alto, fill='#F0F0F0', radio=2)
    doc.texto(x + 3, y + 4, etiqueta, size=PDF_FONTS['TINY'], fill='TEXT_LIGHT')
    doc.texto(x + 3, y + 10, truncar_texto(str(valor), ancho - 6, PDF_FONTS['BODY'], FUENTE_NEGRITA),
              size=PDF_FONTS['BODY'], fuente=FUENTE_NEGRITA)
    return y + alto + 4


def agregar_firmas(doc: DocumentoPDF, firmantes, y, titulo='FIRMAS DE CONFORMIDAD'):
    """
    Cajas de firma en dos columnas: línea, nombre y cargo

    firmantes: lista de dicts con 'nombre' y 'cargo'
    """
    alto_caja = 30
    separacion = 10
    ancho_caja = (doc.ancho_util - separacion) / 2

    y = verificar_salto_pagina(doc, y, alto_caja + 12)
    y = agregar_seccion(doc, titulo, y)

    for i in range(0, len(firmantes), 2):
        y = verificar_salto_pagina(doc, y, alto_caja + 5)
        for j, firmante in enumerate(firmantes[i:i + 2]):
            x = PDF_MARGINS['LEFT'] + j * (ancho_caja + separacion)
            doc.rect(x, y, ancho_caja, alto_caja, stroke='BORDER', radio=2)
            doc.linea(x + 10, y + 18, x + ancho_caja - 10, y + 18, stroke='TEXT', grosor=0.3)
            doc.texto(x + ancho_caja / 2, y + 23,
                      truncar_texto(firmante.get('nombre', ''), ancho_caja - 4, PDF_FONTS['SMALL'], FUENTE_NEGRITA),
                      size=PDF_FONTS['SMALL'], fuente=FUENTE_NEGRITA, align='center')
            doc.texto(x + ancho_caja / 2, y + 27,
                      truncar_texto(firmante.get('cargo', ''), ancho_caja - 4, PDF_FONTS['TINY']),
                      size=PDF_FONTS['TINY'], fill='TEXT_LIGHT', align='center')
        y += alto_caja + 5

    return y


# === Formateadores ===

def formatear_fecha(valor):
    """'2024-03-05' / date / datetime -> '05 de marzo de 2024'"""
    if not valor:
        return '-'
    if isinstance(valor, str):
        try:
            valor = datetime.fromisoformat(valor.replace('Z', '+00:00'))
        except ValueError:
            return valor
    if isinstance(valor, datetime):
        valor = valor.date()
    if not isinstance(valor, date):
        return str(valor)
    return f'{valor.day:02d} de {MESES[valor.month - 1]} de {valor.year}'


def formatear_numero(valor):
    """1234567.5 -> '1,234,567.5' (hasta 3 decimales, como en es-PE)"""
    if valor is None:
        return '-'
    if isinstance(valor, int) or float(valor).is_integer():
        return f'{int(valor):,}'
    return f'{float(valor):,.3f}'.rstrip('0').rstrip('.')


def formatear_porcentaje(valor):
    return f'{float(valor or 0):.1f}%'
