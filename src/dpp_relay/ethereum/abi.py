"""ABI fragment for the DPP registry contract's PanelEventAdded event."""

from __future__ import annotations

EVENT_NAME = "PanelEventAdded"
EVENT_SIGNATURE = "PanelEventAdded(string,string,bytes32,address,uint256)"

PANEL_EVENT_ADDED_ABI = [
    {
        "anonymous": False,
        "type": "event",
        "name": EVENT_NAME,
        "inputs": [
            {"indexed": False, "internalType": "string", "name": "panelId", "type": "string"},
            {"indexed": False, "internalType": "string", "name": "eventType", "type": "string"},
            {"indexed": False, "internalType": "bytes32", "name": "eventHash", "type": "bytes32"},
            {"indexed": False, "internalType": "address", "name": "validatedBy", "type": "address"},
            {"indexed": False, "internalType": "uint256", "name": "timestamp", "type": "uint256"},
        ],
    }
]
