from django.urls import path
from . import views

app_name = 'barcodes'

urlpatterns = [
    # POST /api/barcodes/generate/          - Attach a barcode to a cap
    # GET  /api/barcodes/inspect/?barcode=  - Inspect a scanned barcode
    # GET  /api/barcodes/cap/{cap_id}/      - Original + duplicates of a cap
    # POST /api/barcodes/switch_original/   - Promote a duplicate to original
    # GET  /api/barcodes/summary/           - Total caps and caps without barcode
    # GET  /api/barcodes/missing/?limit=    - Caps without barcode, newest first
    path('generate/', views.generate, name='generate'),
    path('inspect/', views.inspect, name='inspect'),
    path('cap/<int:cap_id>/', views.cap_barcodes, name='cap-barcodes'),
    path('switch_original/', views.switch_original_view, name='switch-original'),
    path('summary/', views.summary, name='summary'),
    path('missing/', views.missing, name='missing'),
]
