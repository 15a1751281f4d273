"""Patient allergy records with severity history, access grants and drug interaction checks."""