"""
Capa de servicios (lógica de negocio).

Este paquete contiene la lógica de negocio separada de las vistas:
- estado_service: Cálculo de vencimientos y actualización de estados
- archivo_service: Almacenamiento de archivos adjuntos
- reporte_service: Armado de los reportes

Los services encapsulan operaciones que involucran múltiples modelos y son
compartidos por las vistas y los comandos de gestión.
"""
