"""
Utilidades de AxiomaDocs.

- tokens: Generación y verificación de JWT
- email: Correos de recuperación de contraseña (Resend)
- export_utils: Exportación de reportes a CSV, Excel y PDF
"""
