from django.urls import path
from . import views

urlpatterns = [
    # Finite automata (DFA/NFA, mode auto-detected when not given)
    path('api/simulate-fa/', views.simulate_fa, name='simulate_fa'),
    path('api/check-fa-type/', views.check_fa_type, name='check_fa_type'),
    path('api/subset-construction/', views.convert_subset_construction, name='subset_construction'),
    path('api/minimise-dfa/', views.minimise, name='minimise_dfa'),

    # Pushdown automata
    path('api/simulate-pda/', views.simulate_pushdown, name='simulate_pda'),

    # Turing machines
    path('api/simulate-tm/', views.simulate_turing, name='simulate_tm'),

    # Context-free grammars
    path('api/derive-cfg/', views.derive_cfg, name='derive_cfg'),
]
