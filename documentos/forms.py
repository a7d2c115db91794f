"""
Formularios de validación para los cuerpos JSON de la API.

Los campos llevan el nombre del modelo (snake_case) y las claves camelCase
del JSON se traducen al bindear el formulario. Todos los campos son
opcionales: cada vista controla sus obligatorios, así un PUT parcial solo
valida lo que recibe.
"""
import re
from datetime import date

from django import forms
from django.core.exceptions import ValidationError


def a_snake(clave):
    """fechaEmision -> fecha_emision"""
    return re.sub(r'(?<!^)(?=[A-Z])', '_', clave).lower()


class FechaField(forms.DateField):
    """Fecha ISO (YYYY-MM-DD). Un datetime ISO se recorta a su fecha."""

    def to_python(self, value):
        if isinstance(value, str) and 'T' in value:
            value = value.strip()[:10]
        elif value is not None and not isinstance(value, (str, date)):
            value = str(value)
        return super().to_python(value)


class BooleanoField(forms.NullBooleanField):
    """true/false, 1/0 o sí; cualquier otro valor es un error."""
    widget = forms.TextInput

    def to_python(self, value):
        if isinstance(value, str) and value.strip().lower() in ('si', 'sí', 'on'):
            return True
        resultado = super().to_python(value)
        if resultado is None and value not in self.empty_values:
            raise ValidationError('Ingrese true o false.', code='invalid')
        return resultado


class ApiForm(forms.Form):
    """Formulario bindeado al cuerpo JSON de una petición."""

    def __init__(self, data, *args, **kwargs):
        self.claves = {a_snake(clave): clave for clave in data}
        super().__init__({a_snake(clave): valor for clave, valor in data.items()}, *args, **kwargs)
        for field in self.fields.values():
            field.required = False

    def validar(self):
        """
        Retorna los campos recibidos ya convertidos.

        Si hay errores lanza ValidationError con las claves tal como llegaron
        en el JSON; ApiView la convierte en una respuesta 400.
        """
        if not self.is_valid():
            raise ValidationError({
                self.claves.get(campo, campo): errores
                for campo, errores in self.errors.as_data().items()
            })
        # Un número o booleano vacío conserva el valor actual; una fecha vacía la borra
        return {
            campo: valor
            for campo, valor in self.cleaned_data.items()
            if campo in self.claves
            and (valor is not None or isinstance(self.fields[campo], FechaField))
        }


# ============================================================================
# ESTADOS Y DOCUMENTACIÓN
# ============================================================================

class EstadoForm(ApiForm):
    nombre = forms.CharField(max_length=100)
    codigo = forms.CharField(max_length=20)
    color = forms.CharField(max_length=7)
    nivel = forms.IntegerField(min_value=1)
    descripcion = forms.CharField()


class FechasDocumentoForm(ApiForm):
    CAMPOS_FECHA = ('fecha_emision', 'fecha_tramitacion', 'fecha_vencimiento')

    fecha_emision = FechaField()
    fecha_tramitacion = FechaField()
    fecha_vencimiento = FechaField()

    def fechas(self, datos):
        return {campo: datos[campo] for campo in self.CAMPOS_FECHA if campo in datos}


class DocumentacionForm(FechasDocumentoForm):
    codigo = forms.CharField(max_length=50)
    descripcion = forms.CharField(max_length=255)
    dias_vigencia = forms.IntegerField(min_value=1)
    dias_anticipacion = forms.IntegerField(min_value=0)
    es_obligatorio = BooleanoField()
    es_universal = BooleanoField()


# ============================================================================
# RECURSOS
# ============================================================================

class RecursoForm(ApiForm):
    codigo = forms.CharField(max_length=50)
    apellido = forms.CharField(max_length=100)
    nombre = forms.CharField(max_length=100)
    telefono = forms.CharField(max_length=50)
    cuil = forms.CharField(max_length=20)
    direccion = forms.CharField(max_length=255)
    localidad = forms.CharField(max_length=100)
    fecha_alta = FechaField()
    fecha_baja = FechaField()


class RecursoDocumentacionForm(FechasDocumentoForm):
    observaciones = forms.CharField()


# ============================================================================
# ENTIDADES
# ============================================================================

class EntidadForm(ApiForm):
    razon_social = forms.CharField(max_length=200)
    cuit = forms.CharField(max_length=20)
    domicilio = forms.CharField(max_length=255)
    telefono = forms.CharField(max_length=50)
    localidad = forms.CharField(max_length=100)
    url_plataforma_documentacion = forms.CharField(max_length=500)


class EntidadDocumentacionForm(FechasDocumentoForm):
    es_inhabilitante = BooleanoField()
    enviar_por_mail = BooleanoField()
    mail_destino = forms.CharField(max_length=254)


class EntidadRecursoForm(ApiForm):
    fecha_inicio = FechaField()
    fecha_fin = FechaField()
    activo = BooleanoField()
    observaciones = forms.CharField()
