"""Prompt for lab report extraction."""

from config.settings import AI_RESPONSE_SCHEMA_VERSION

REPORT_EXTRACTION_PROMPT = f"""You are a medical lab report analyzer. Extract ALL health parameters from this lab report.

INSTRUCTIONS:
1. Extract EVERY parameter you can find (blood tests, vitals, medical history, symptoms, diagnoses).
2. NUMERIC parameters (lab values, vitals): "value" is a number.
3. CATEGORICAL or TEXT parameters: "value" is null and the actual text goes in "textValue".
4. BOOLEAN parameters (yes/no findings): "value" is true or false.
5. "status" is one of "Normal", "High", "Low", "Abnormal", "Present", "Absent", "Unknown".
6. "parameterType" is one of "numeric", "categorical", "text", "boolean".
7. Extract patient information if visible.
8. Provide medical insights with outliers and recommendations.

Return ONLY valid JSON in this EXACT format (no markdown, no code blocks):
{{
  "schemaVersion": "{AI_RESPONSE_SCHEMA_VERSION}",
  "patientInfo": {{
    "name": "patient name or null",
    "age": "age or null",
    "gender": "gender or null",
    "testDate": "date or null",
    "hospital": "hospital name or null"
  }},
  "parameters": [
    {{
      "name": "Total Cholesterol",
      "value": 250,
      "unit": "mg/dL",
      "normalRange": "125-200",
      "status": "High",
      "category": "Lipid Panel",
      "parameterType": "numeric",
      "textValue": null
    }},
    {{
      "name": "Hypertension Status",
      "value": null,
      "unit": "",
      "normalRange": "N/A",
      "status": "Abnormal",
      "category": "Medical History",
      "parameterType": "categorical",
      "textValue": "Diagnosed 3 years ago, managing with medication"
    }}
  ],
  "insights": {{
    "summary": "Brief overall health summary",
    "outliers": [
      {{
        "parameter": "Total Cholesterol",
        "value": 250,
        "normalRange": "125-200",
        "severity": "Moderate",
        "concern": "Elevated cholesterol increases cardiovascular risk",
        "recommendation": "Consult a cardiologist for a management plan"
      }}
    ],
    "recommendations": ["Consult doctor about elevated cholesterol"],
    "riskLevel": "Low",
    "positiveFindings": ["Blood pressure within optimal range"],
    "trendsToMonitor": ["Total Cholesterol"],
    "lifestyle": {{"diet": [], "exercise": [], "habits": []}}
  }},
  "extractedText": "full text content from the report",
  "confidence": 0.95
}}

VALID SEVERITY VALUES: "Mild", "Moderate", "Severe"
VALID RISK LEVELS: "Low", "Moderate", "High"
"""
